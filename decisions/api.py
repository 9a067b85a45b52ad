import logging
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .auth import get_current_user_email
from .models import (
    ExecuteRequest, ExecuteResponse, RuleSetPayload,
    RuleSetResponse, RuleSetListResponse, MessageResponse,
)
from .service import (
    DecisionRuleService, NoActiveRulesError,
    RuleSetNotFoundError, RuleSetAccessDeniedError,
)
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/decision")


def get_rule_service(request: Request) -> DecisionRuleService:
    return request.app.state.rule_service


def _not_found_or_denied(e: Exception) -> HTTPException:
    if isinstance(e, RuleSetAccessDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/execute", response_model=ExecuteResponse, tags=["Execution"])
def execute_rules(
    request: ExecuteRequest,
    service: DecisionRuleService = Depends(get_rule_service),
) -> ExecuteResponse:
    try:
        return service.execute(request)
    except NoActiveRulesError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/rules", response_model=RuleSetListResponse, tags=["Rule Sets"])
def list_rule_sets(
    owner: str = Depends(get_current_user_email),
    service: DecisionRuleService = Depends(get_rule_service),
) -> RuleSetListResponse:
    return RuleSetListResponse(rules=service.list_rule_sets(owner))


@router.post("/rules", response_model=RuleSetResponse, status_code=status.HTTP_201_CREATED, tags=["Rule Sets"])
def create_rule_set(
    payload: RuleSetPayload,
    owner: str = Depends(get_current_user_email),
    service: DecisionRuleService = Depends(get_rule_service),
) -> RuleSetResponse:
    return RuleSetResponse(rule=service.create_rule_set(payload, owner))


@router.get("/rules/{rule_set_id}", response_model=RuleSetResponse, tags=["Rule Sets"])
def get_rule_set(
    rule_set_id: str,
    owner: str = Depends(get_current_user_email),
    service: DecisionRuleService = Depends(get_rule_service),
) -> RuleSetResponse:
    try:
        return RuleSetResponse(rule=service.get_rule_set(rule_set_id, owner))
    except (RuleSetNotFoundError, RuleSetAccessDeniedError) as e:
        raise _not_found_or_denied(e)


@router.put("/rules/{rule_set_id}", response_model=RuleSetResponse, tags=["Rule Sets"])
def update_rule_set(
    rule_set_id: str,
    payload: RuleSetPayload,
    owner: str = Depends(get_current_user_email),
    service: DecisionRuleService = Depends(get_rule_service),
) -> RuleSetResponse:
    try:
        return RuleSetResponse(rule=service.update_rule_set(rule_set_id, payload, owner))
    except (RuleSetNotFoundError, RuleSetAccessDeniedError) as e:
        raise _not_found_or_denied(e)


@router.delete("/rules/{rule_set_id}", response_model=MessageResponse, tags=["Rule Sets"])
def delete_rule_set(
    rule_set_id: str,
    owner: str = Depends(get_current_user_email),
    service: DecisionRuleService = Depends(get_rule_service),
) -> MessageResponse:
    try:
        service.delete_rule_set(rule_set_id, owner)
    except (RuleSetNotFoundError, RuleSetAccessDeniedError) as e:
        raise _not_found_or_denied(e)
    return MessageResponse(message="Rule deleted successfully")


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[DecisionRuleService] = None,
    root_path: str = "",
) -> FastAPI:
    """Build the API. Passing settings pins them for every request-scoped dependency too."""
    if settings is None:
        settings = get_settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Decision Rules API",
        description="User-authored decision rule sets evaluated against tabular data",
        version="1.0.0",
        root_path=root_path,
    )
    app.state.rule_service = service or DecisionRuleService()
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    @app.get("/health", tags=["System"])
    def health_check():
        return {"status": "healthy", "service": "decision-rules"}

    app.include_router(router)
    logger.info("Decision Rules API ready (environment=%s)", settings.environment)
    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
