"""
FastAPI application for the inspector sidecar.

`create_app` wires settings, the document map and `InspectorService` into the
routes. Environment files are loaded by the entry point (`backend/main.py`)
before settings are read.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from .config import Settings, load_document_templates
from .errors import InspectorError, InvalidTemplatePath, PdftkError, TemplateNotFound
from .service import InspectorService

logger = logging.getLogger("inspector.api")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class FieldsResponse(BaseModel):
    fields: List[str]


class TemplateInfo(BaseModel):
    template: str                      # relative to the templates root
    pages: Optional[int] = None        # None when the PDF could not be parsed
    field_count: Optional[int] = None


class TemplatesResponse(BaseModel):
    templates: List[TemplateInfo]


def get_service(request: Request) -> InspectorService:
    return request.app.state.service


def _require_template(template: Optional[str]) -> str:
    if not template:
        raise HTTPException(status_code=400, detail="template query parameter is required")
    return template


def _to_http_error(exc: InspectorError) -> HTTPException:
    if isinstance(exc, InvalidTemplatePath):
        return HTTPException(status_code=400, detail="invalid template path")
    if isinstance(exc, TemplateNotFound):
        return HTTPException(status_code=404, detail="template not found")
    if isinstance(exc, PdftkError):
        return HTTPException(status_code=500, detail=str(exc))
    logger.error("Unexpected inspector error: %s", exc, exc_info=True)
    return HTTPException(status_code=500, detail=str(exc))


def create_app(
    settings: Optional[Settings] = None,
    document_templates: Optional[Dict[str, str]] = None,
) -> FastAPI:
    """
    Build the sidecar application.

    `document_templates` defaults to the JSON table named by
    ``settings.document_map_file``; it is read once here.
    """
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    if document_templates is None:
        document_templates = load_document_templates(settings.document_map_file)

    app = FastAPI(title="Inspector sidecar")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_cors_urls),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.service = InspectorService(settings, document_templates)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/")
    def index(service: InspectorService = Depends(get_service)):
        """The form itself is served by the Streamlit front end."""
        return RedirectResponse(service.settings.form_url)

    @app.get("/templates", response_model=TemplatesResponse)
    def list_templates(service: InspectorService = Depends(get_service)):
        return {"templates": service.list_templates()}

    @app.get("/fields", response_model=FieldsResponse)
    def list_fields(
        template: Optional[str] = None,
        service: InspectorService = Depends(get_service),
    ):
        """Return the AcroForm field names of `template` (relative to the templates root)."""
        template = _require_template(template)
        try:
            fields = service.list_fields(template)
        except InspectorError as exc:
            raise _to_http_error(exc) from exc
        return {"fields": fields}

    @app.get("/start")
    def start(
        doc_id: Optional[str] = None,
        service: InspectorService = Depends(get_service),
    ):
        """
        Redirect to the form entry point for a Paperless document.
        Unknown document IDs land on the plain entry point.
        """
        return RedirectResponse(service.start_location(doc_id))

    @app.post("/submit")
    def submit(
        template: Optional[str] = None,
        values: Dict[str, Any] = Body(default={}),
        service: InspectorService = Depends(get_service),
    ):
        """Fill `template` with the JSON body (field name -> value) and return the flattened PDF."""
        template = _require_template(template)
        try:
            pdf_bytes = service.fill(template, values)
        except InspectorError as exc:
            raise _to_http_error(exc) from exc
        headers = {"Content-Disposition": "attachment; filename=report.pdf"}
        return Response(content=pdf_bytes, media_type="application/pdf", headers=headers)

    logger.info(
        "Inspector sidecar configured (templates=%s, %d document mappings)",
        settings.templates_root,
        len(document_templates),
    )
    return app
