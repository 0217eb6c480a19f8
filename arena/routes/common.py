from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

FLASH_KEY = "flash"

def flash(request: Request, message: str, category: str = "error") -> None:
    """Queues a dismissible notification for the next rendered page."""
    messages = request.session.get(FLASH_KEY, [])
    messages.append({"message": message, "category": category})
    request.session[FLASH_KEY] = messages

def pop_flashes(request: Request) -> List[Dict[str, str]]:
    return request.session.pop(FLASH_KEY, [])

def form_errors(exc: ValidationError) -> Dict[str, str]:
    """First message per field, for inline display next to the input."""
    errors: Dict[str, str] = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "__all__"
        errors.setdefault(field, error["msg"])
    return errors

def render(request: Request, name: str, context: Optional[Dict[str, Any]] = None, status_code: int = 200):
    page_context = {
        "auth": request.state.auth,
        "flashes": pop_flashes(request),
    }
    page_context.update(context or {})
    return templates.TemplateResponse(request, name, page_context, status_code=status_code)
