import time
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from ..core.config_loader import load_exporter_config
from ..core.errors import AuthenticationError, ExportError, RepositoryCreationError, ValidationError
from ..core.models import ExporterConfig, ExportRequest
from ..workflow.pipeline import ClientFactory, run_export

SUCCESS_MESSAGE = "Project exported to GitHub successfully!"
FALLBACK_ERROR = "An unknown error occurred"


# --- DATA MODELS ---
class ExportRequestBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: Optional[str] = None
    repo_name: Optional[str] = Field(default=None, alias="repoName")
    repo_description: Optional[str] = Field(default=None, alias="repoDescription")


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def create_app(
    config: Optional[ExporterConfig] = None,
    client_factory: Optional[ClientFactory] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> FastAPI:
    config = config or load_exporter_config()

    app = FastAPI(title="Project Exporter API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        return _error("Request body must be a JSON object with token and repoName", 400)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    # Sync endpoint: the export blocks on sequential HTTP calls, so it runs in the worker threadpool
    @app.post("/api/github/export-full-project")
    def export_full_project(body: ExportRequestBody):
        request = ExportRequest(
            token=body.token,
            repo_name=body.repo_name,
            repo_description=body.repo_description,
        )

        try:
            result = run_export(request, config, client_factory=client_factory, sleep=sleep)
        except (ValidationError, AuthenticationError, RepositoryCreationError) as e:
            logger.warning(f"Export rejected ({e.status_code}): {e.message}")
            return _error(e.message, e.status_code)
        except ExportError as e:
            logger.exception("Export failed")
            return _error(f"Export failed: {e.message or FALLBACK_ERROR}", 500)
        except Exception as e:
            logger.exception("Export failed")
            return _error(f"Export failed: {str(e) or FALLBACK_ERROR}", 500)

        return {
            "success": True,
            "repoUrl": result.repository.html_url,
            "message": SUCCESS_MESSAGE,
            "stats": result.summary.to_stats(),
        }

    return app
