from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import SIGNATURE_HEADER, TIMESTAMP_HEADER, RequestAuthenticator
from .config import Settings, configure_logging, get_settings
from .cors import AccessPolicy
from .errors import AuthError, ProxyError, VerificationError
from .executor import ExecutionProxy
from .schemas import RunPayload, VerificationResponse, VerifyPayload
from .testcases import pair_uploaded_files
from .verifier import VerificationOrchestrator


async def require_credential(request: Request) -> None:
    authenticator = request.app.state.authenticator
    if authenticator is None:
        return
    authenticator.check(
        request.headers.get(TIMESTAMP_HEADER),
        request.headers.get(SIGNATURE_HEADER),
    )


def create_app(settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f'Executor proxy ready: target={settings.executor_url} '
            f'auth={"required" if settings.auth_required else "off"} origins={settings.allowed_origins}'
        )
        yield
        await app.state.http_client.aclose()

    app = FastAPI(title='Code Verification API', lifespan=lifespan)

    app.state.settings = settings
    app.state.http_client = httpx.AsyncClient(timeout=settings.executor_timeout_seconds, transport=transport)
    app.state.access_policy = AccessPolicy(settings.allowed_origins)
    app.state.authenticator = (
        RequestAuthenticator(settings.shared_secret.get_secret_value(), settings.freshness_window_ms)
        if settings.auth_required else None
    )
    app.state.proxy = ExecutionProxy(settings.executor_url, app.state.http_client)
    app.state.orchestrator = VerificationOrchestrator(app.state.proxy, settings.verify_delay_seconds)

    @app.middleware('http')
    async def access_policy_gate(request: Request, call_next):
        policy = request.app.state.access_policy
        headers = policy.decorate(request.headers.get('origin'), request.method)
        if policy.is_preflight(request.method):
            return Response(status_code=200, headers=headers)
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f'Unhandled error on {request.method} {request.url.path}')
            response = JSONResponse(status_code=500, content={'error': 'Internal Server Error'})
        response.headers.update(headers)
        return response

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        logger.warning(f'Unauthorized {request.method} {request.url.path}: {exc.reason.value}')
        return JSONResponse(
            status_code=403,
            content={'error': 'Unauthorized', 'timestamp': datetime.now(timezone.utc).isoformat()},
        )

    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError):
        return JSONResponse(status_code=500, content={'error': 'Failed to execute code', 'details': exc.message})

    @app.exception_handler(VerificationError)
    async def verification_error_handler(request: Request, exc: VerificationError):
        return JSONResponse(status_code=400, content={'error': 'Invalid verification request', 'details': str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = [{'loc': list(e.get('loc', ())), 'msg': e.get('msg', '')} for e in exc.errors()]
        return JSONResponse(status_code=400, content={'error': 'Invalid request', 'details': details})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content={'error': 'Not Found'})
        return JSONResponse(status_code=exc.status_code, content={'error': exc.detail})

    @app.get('/')
    async def health():
        return {'message': 'API is running!'}

    @app.post('/api/run', dependencies=[Depends(require_credential)])
    async def run_code(req: RunPayload, request: Request):
        data = await request.app.state.proxy.forward(req.model_dump(mode='json', exclude_unset=True))
        return JSONResponse(status_code=200, content=data)

    @app.post('/api/verify', response_model=VerificationResponse, dependencies=[Depends(require_credential)])
    async def verify_code(req: VerifyPayload, request: Request):
        cases = req.test_cases or pair_uploaded_files(req.uploads)
        run = await request.app.state.orchestrator.run(req.properties, cases, req.method)
        return VerificationResponse(results=run.results, summary=run.summary, state=run.state.value)

    return app
