import logging
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.templating import Jinja2Templates
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS, LOG_LEVEL, STATIC_DIR, TEMPLATES_DIR
from database import engine, Base

# --- IMPORT ROUTERS (APIs) ---
from routers import dashboard, students, parents, attendance, yearly, auth, notifications, biometric
from routers.auth import COOKIE_NAME, decode_access_token

# --- IMPORT MODELS (registers every table on Base) ---
from models.students import Student
from models.parents import ParentDetail
from models.attendance import DailyAttendance, YearlyAttendance
from models.system import AdminProfile
from models.communication import NotificationLog

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# --- CREATE DATABASE TABLES ---
Base.metadata.create_all(bind=engine)

app = FastAPI(title="AttendEase - School Attendance Dashboard")

# ==========================================
# ✅ SECURITY MIDDLEWARE
# ==========================================
PUBLIC_PATHS = ["/auth/login", "/auth/signup"]
# Device and messaging functions authenticate on their own side
PUBLIC_PREFIXES = ["/static", "/functions/"]


@app.middleware("http")
async def auth_middleware(request: Request, call_next):
    path = request.url.path

    if request.method != "OPTIONS" \
       and path not in PUBLIC_PATHS \
       and not any(path.startswith(p) for p in PUBLIC_PREFIXES):

        if not decode_access_token(request.cookies.get(COOKIE_NAME)):
            if path.startswith("/api/"):
                return JSONResponse({"detail": "Not authenticated"}, status_code=401)
            return RedirectResponse(url="/auth/login")

    response = await call_next(request)
    return response

# ==========================================
# ✅ CORS MIDDLEWARE
# ==========================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials="*" not in CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- STATIC FILES & TEMPLATES ---
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
templates = Jinja2Templates(directory=TEMPLATES_DIR)

# --- REGISTER ROUTERS ---
app.include_router(dashboard.router)
app.include_router(students.router)
app.include_router(parents.router)
app.include_router(attendance.router)
app.include_router(yearly.router)
app.include_router(auth.router)
app.include_router(notifications.router)
app.include_router(biometric.router)

# ===========================
#   WEB PAGES (Admin Panel)
# ===========================

@app.get("/students")
def student_list_page(request: Request):
    return templates.TemplateResponse(request, "students.html", {})


@app.get("/parents")
def parent_list_page(request: Request, roll_no: Optional[int] = None):
    return templates.TemplateResponse(request, "parents.html", {"roll_no": roll_no})
