"""
FastAPI server for the expense tracker web app.
Serves the expense form, Google sign-in and the categories/expenses API.
"""
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, Field, field_validator
from rich.console import Console
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from expense_tracker import __version__, auth, config, sheets_client

console = Console()

app = FastAPI(title="Expense Tracker API", version=__version__)

# Signed session cookie carrying the signed-in user
app.add_middleware(
    SessionMiddleware,
    secret_key=config.SESSION_SECRET,
    same_site="lax",
    https_only=config.BASE_URL.startswith("https://"),
)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

SIGNIN_PATH = "/auth/signin"


class ExpenseRequest(BaseModel):
    amount: float = Field(gt=0, allow_inf_nan=False)
    category: str

    @field_validator("amount", mode="before")
    @classmethod
    def amount_not_bool(cls, value):
        # JSON true/false would otherwise coerce to 1.0/0.0
        if isinstance(value, bool):
            raise ValueError("amount must be a number")
        return value

    @field_validator("category")
    @classmethod
    def category_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("category must not be empty")
        return value


def callback_uri() -> str:
    return f"{config.BASE_URL}/api/auth/callback/google"


def signin_redirect(error: Optional[str] = None) -> RedirectResponse:
    url = f"{SIGNIN_PATH}?error={error}" if error else SIGNIN_PATH
    return RedirectResponse(url, status_code=302)


@app.exception_handler(StarletteHTTPException)
async def api_error_handler(request: Request, exc: StarletteHTTPException):
    """API routes answer with {"error": ...} instead of FastAPI's {"detail": ...}."""
    if request.url.path.startswith("/api/"):
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)
    return await http_exception_handler(request, exc)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}


@app.get("/api/categories")
def list_categories():
    """Categories already used in the current month, for the form's autocomplete."""
    if not config.SPREADSHEET_ID:
        raise HTTPException(status_code=500, detail="Spreadsheet ID not configured", headers=NO_CACHE_HEADERS)

    try:
        categories = sheets_client.get_categories(config.SPREADSHEET_ID)
    except Exception as e:
        console.print(f"[red]Error fetching categories: {e}[/red]")
        raise HTTPException(status_code=500, detail="Failed to fetch categories", headers=NO_CACHE_HEADERS)

    return JSONResponse(categories, headers=NO_CACHE_HEADERS)


@app.post("/api/expenses")
async def create_expense(request: Request):
    """Records an expense in the current month's sheet."""
    if not config.SPREADSHEET_ID:
        raise HTTPException(status_code=500, detail="Spreadsheet ID not configured")

    try:
        expense = ExpenseRequest.model_validate(await request.json())
    except ValueError as e:
        console.print(f"[red]Error adding expense: invalid request body ({e})[/red]")
        raise HTTPException(status_code=500, detail="Failed to add expense")

    success = await run_in_threadpool(
        sheets_client.add_expense, config.SPREADSHEET_ID, expense.category, expense.amount
    )
    if not success:
        raise HTTPException(status_code=500, detail="Failed to add expense")

    return {"success": True}


@app.get("/auth/signin")
def signin_page(request: Request, error: Optional[str] = None):
    return templates.TemplateResponse(request, "signin.html", {"error": error})


@app.get("/api/auth/signin/google")
def signin_google(request: Request):
    url, state, code_verifier = auth.authorization_url(callback_uri())
    request.session["oauth_state"] = state
    if code_verifier:
        request.session["code_verifier"] = code_verifier
    return RedirectResponse(url, status_code=302)


@app.get("/api/auth/callback/google")
def auth_callback(request: Request, code: Optional[str] = None, state: Optional[str] = None,
                  error: Optional[str] = None):
    """Completes the Google code exchange and admits allow-listed users."""
    expected_state = request.session.pop("oauth_state", None)
    code_verifier = request.session.pop("code_verifier", None)

    if error or not code or not expected_state or state != expected_state:
        console.print(f"[yellow]Rejected sign-in callback (error={error})[/yellow]")
        return signin_redirect("Callback")

    try:
        identity = auth.exchange_code(code, callback_uri(), state=state, code_verifier=code_verifier)
    except Exception as e:
        console.print(f"[red]Sign-in failed: {e}[/red]")
        return signin_redirect("Callback")

    user = auth.sign_in(identity)
    if user is None:
        return signin_redirect("AccessDenied")

    request.session["user"] = user
    return RedirectResponse("/", status_code=302)


@app.api_route("/api/auth/signout", methods=["GET", "POST"])
def signout(request: Request):
    request.session.clear()
    return RedirectResponse(SIGNIN_PATH, status_code=303)


@app.get("/api/auth/session")
def get_session(request: Request):
    return request.session.get("user") or {}


@app.get("/")
def index(request: Request):
    user = request.session.get("user")
    if not user:
        return signin_redirect()

    currency_symbol = config.CURRENCY_PATTERN.split("#")[0]
    return templates.TemplateResponse(
        request, "index.html", {"user": user, "currency_symbol": currency_symbol}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
