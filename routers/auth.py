import logging
import re
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, responses
from fastapi.templating import Jinja2Templates
from jose import JWTError, jwt
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES, TEMPLATES_DIR
from database import get_db
from models.system import AdminProfile

logger = logging.getLogger(__name__)

# ✅ Router setup with prefix
router = APIRouter(prefix="/auth", tags=["Authentication"])
templates = Jinja2Templates(directory=TEMPLATES_DIR)

COOKIE_NAME = "user_token"
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# ✅ Login / Sign-up Data Model
class CredentialsSchema(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        v = v.strip().lower()
        if len(v) > 255:
            raise ValueError("Email too long")
        if not EMAIL_RE.match(v):
            raise ValueError("Invalid email address")
        return v

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        if len(v) > 128:
            raise ValueError("Password too long")
        return v


# ===========================
#     HELPER FUNCTIONS
# ===========================

def create_access_token(data: dict):
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: Optional[str]) -> Optional[dict]:
    """Payload of a valid admin token, or None."""
    if not token:
        return None
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("sub") is None or payload.get("role") != "admin":
        return None
    return payload


def _start_session(response: Response, admin: AdminProfile):
    token = create_access_token({"sub": str(admin.id), "email": admin.email, "role": "admin"})
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )


# ===========================
#        ROUTES
# ===========================

# 1. Login Page Route (GET)
@router.get("/login")
def login_page(request: Request):
    if decode_access_token(request.cookies.get(COOKIE_NAME)):
        return responses.RedirectResponse(url="/", status_code=302)
    return templates.TemplateResponse(request, "login.html", {})


# 2. Login Process Route (POST)
@router.post("/login")
def process_login(response: Response, data: CredentialsSchema, db: Session = Depends(get_db)):
    admin = db.query(AdminProfile).filter(AdminProfile.email == data.email).first()
    if not admin or not check_password_hash(admin.password_hash, data.password):
        logger.info("Failed login for %s", data.email)
        raise HTTPException(status_code=401, detail="Invalid email or password. Please try again.")

    _start_session(response, admin)
    return {"status": "success", "message": "You have successfully logged in.", "redirect_url": "/"}


# 3. Sign-up Route (POST)
@router.post("/signup")
def process_signup(response: Response, data: CredentialsSchema, db: Session = Depends(get_db)):
    existing = db.query(AdminProfile).filter(AdminProfile.email == data.email).first()
    if existing:
        raise HTTPException(status_code=400, detail="This email is already registered. Please login instead.")

    admin = AdminProfile(email=data.email, password_hash=generate_password_hash(data.password))
    try:
        db.add(admin)
        db.commit()
        db.refresh(admin)
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))

    logger.info("New admin account %s", admin.email)
    _start_session(response, admin)
    return {"status": "success", "message": "You can now access the dashboard.", "redirect_url": "/"}


# 4. Logout Route (GET)
@router.get("/logout")
def logout():
    """
    Admin ko logout karke wapas login page par bhejta hai aur cookie delete karta hai.
    """
    response = responses.RedirectResponse(url="/auth/login", status_code=302)
    response.delete_cookie(COOKIE_NAME)
    return response
