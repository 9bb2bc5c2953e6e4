"""
main.py

FastAPI application exposing search suggestions, text and image-assisted
product search, and one-time passcode endpoints.
Loads the catalog snapshot and keyword tables at startup.
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional, Tuple
import logging

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from storefront.otp.config import (
    ADMIN_ACCESS,
    EMAIL_VERIFICATION,
    PASSWORD_RESET,
    PHONE_VERIFICATION,
    PURPOSE_DEFAULTS,
    TRANSACTION_PURPOSE_PREFIX,
    TRANSACTION_VERIFICATION,
    OTPConfig,
    config_for_purpose,
)
from storefront.otp.manager import MissingParameterError, OTPManager
from storefront.search.catalog import CatalogStore, Product, search_by_keywords
from storefront.search.dictionary import KeywordTables
from storefront.search.fuzzy import fuzzy_search_products
from storefront.search.preprocess import extract_keywords
from storefront.search.scoring import generate_suggestions
from storefront.settings import settings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("storefront")

# --------
# FastAPI app
# --------
app = FastAPI(title=settings.api_title, version=settings.api_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --------
# Request models
# --------
class SearchRequest(BaseModel):
    query: str
    max_results: Optional[int] = Field(default=None, ge=1, le=500)


class ImageSearchRequest(BaseModel):
    """Output of the image analyser: detected keywords, best first."""
    keywords: List[str] = Field(default_factory=list)
    confidence: float = 0.0


class OTPRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
    purpose: Optional[str] = None
    type: Optional[Literal["numeric", "alphanumeric"]] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    transaction_id: Optional[str] = Field(default=None, alias="transactionId")


class OTPValidateRequest(OTPRequest):
    code: Optional[str] = None


# --------
# Startup: load catalog and keyword tables
# --------
CATALOG = CatalogStore()
TABLES = KeywordTables.default()
OTP_MANAGER = OTPManager()

try:
    if settings.catalog_csv:
        CATALOG.load_csv(settings.catalog_csv)
    else:
        logger.warning("No catalog CSV configured; search starts empty")

    if settings.keywords_dir:
        TABLES = KeywordTables.from_csv_dir(settings.keywords_dir)
except (OSError, ValueError) as e:
    # fail-fast if configured data files can't be read
    raise RuntimeError(f"Failed to load search data: {e}") from e


# --------
# Helpers
# --------
def _product_payload(product: Product, score: Optional[float] = None) -> dict:
    payload = product.model_dump()
    if score is not None:
        payload["searchScore"] = round(score, 4)
    return payload


def _otp_target(req: OTPRequest) -> Tuple[str, str, OTPConfig]:
    """
    Resolve the record key and policy for a request.
    Email and phone purposes are keyed by the address, transaction codes by
    user and transaction id.
    """
    if not req.user_id or not req.purpose:
        raise HTTPException(status_code=400, detail="userId and purpose are required")

    purpose = req.purpose
    if purpose in (EMAIL_VERIFICATION, PASSWORD_RESET):
        if not req.email:
            raise HTTPException(status_code=400, detail=f"email is required for {purpose.replace('-', ' ')}")
        return req.email, purpose, PURPOSE_DEFAULTS[purpose]

    if purpose == PHONE_VERIFICATION:
        if not req.phone:
            raise HTTPException(status_code=400, detail="phone is required for phone verification")
        return req.phone, purpose, PURPOSE_DEFAULTS[purpose]

    if purpose == TRANSACTION_VERIFICATION:
        if not req.transaction_id:
            raise HTTPException(status_code=400, detail="transactionId is required for transaction verification")
        key = f"{TRANSACTION_PURPOSE_PREFIX}{req.transaction_id}"
        return req.user_id, key, PURPOSE_DEFAULTS[TRANSACTION_VERIFICATION]

    if purpose == ADMIN_ACCESS:
        return req.user_id, purpose, PURPOSE_DEFAULTS[ADMIN_ACCESS]

    return req.user_id, purpose, config_for_purpose(purpose, req.type)


def _issue(req: OTPRequest, resend: bool) -> dict:
    subject, key, config = _otp_target(req)
    try:
        if resend:
            code = OTP_MANAGER.resend(subject, key, config)
        else:
            code = OTP_MANAGER.generate(subject, key, config)
    except MissingParameterError as e:
        raise HTTPException(status_code=400, detail=str(e))

    status = OTP_MANAGER.get_status(subject, key)
    data = {
        "purpose": req.purpose,
        "expiresAt": status.expires_at.isoformat() if status.expires_at else None,
        "maxAttempts": status.max_attempts,
    }
    # codes go out of band (email/SMS) outside development
    if settings.is_development:
        data["otp"] = code

    return {
        "success": True,
        "message": "OTP resent successfully" if resend else "OTP generated successfully",
        "data": data,
    }


# --------
# Endpoints
# --------
@app.get("/api/health")
async def health():
    return {"status": "ok", "products_loaded": CATALOG.size(), "otp_records": OTP_MANAGER.size()}


@app.get("/api/search-suggestions")
async def search_suggestions(q: str = ""):
    query = q.strip()
    suggestions = generate_suggestions(CATALOG.suggestion_candidates(), query, settings.suggestion_limit, TABLES)
    return {"suggestions": suggestions}


@app.post("/api/search")
async def search(req: SearchRequest):
    if not req.query or not req.query.strip():
        raise HTTPException(status_code=400, detail="query must be a non-empty string")

    max_results = req.max_results or settings.text_search_max_results
    hits = fuzzy_search_products(CATALOG.all_products(), req.query, max_results=max_results)
    products = [_product_payload(h.product, h.score) for h in hits]
    return {
        "success": True,
        "products": products,
        "keywords": list(extract_keywords(req.query)),
        "searchType": "text",
        "totalCount": len(products),
    }


@app.post("/api/image-search")
async def image_search(req: ImageSearchRequest):
    keywords = [k.strip() for k in req.keywords if k and k.strip()]
    if not keywords:
        raise HTTPException(
            status_code=400,
            detail="Could not extract keywords from image. Try an image with visible text or product labels.",
        )

    matched = search_by_keywords(
        CATALOG,
        keywords,
        keyword_limit=settings.image_search_keyword_limit,
        max_results=settings.image_search_max_results,
        tables=TABLES,
    )
    logger.info(f"Image search: {len(keywords)} keywords, {len(matched)} products, confidence {req.confidence}")
    return {
        "success": True,
        "products": [_product_payload(p) for p in matched],
        "keywords": keywords,
        "searchType": "image",
        "totalCount": len(matched),
        "confidence": req.confidence,
    }


@app.post("/api/otp/generate")
async def otp_generate(req: OTPRequest):
    return _issue(req, resend=False)


@app.post("/api/otp/resend")
async def otp_resend(req: OTPRequest):
    return _issue(req, resend=True)


@app.post("/api/otp/validate")
async def otp_validate(req: OTPValidateRequest):
    if not req.code:
        raise HTTPException(status_code=400, detail="userId, purpose, and code are required")
    subject, key, _config = _otp_target(req)

    result = OTP_MANAGER.validate(subject, key, req.code)
    if result.valid:
        return {
            "success": True,
            "message": result.message,
            "data": {
                "purpose": req.purpose,
                "validated": True,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        }

    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": result.message,
            "data": {
                "purpose": req.purpose,
                "validated": False,
                "remainingAttempts": result.remaining_attempts,
            },
        },
    )


@app.get("/api/otp/status")
async def otp_status(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    purpose: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    transaction_id: Optional[str] = Query(default=None, alias="transactionId"),
):
    req = OTPRequest(userId=user_id, purpose=purpose, email=email, phone=phone, transactionId=transaction_id)
    subject, key, _config = _otp_target(req)

    status = OTP_MANAGER.get_status(subject, key)
    return {
        "exists": status.exists,
        "expiresAt": status.expires_at.isoformat() if status.expires_at else None,
        "maxAttempts": status.max_attempts,
        "attemptsRemaining": status.attempts_remaining,
    }


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    """Report malformed bodies as 400 like the other contract violations."""
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid parameters") if errors else "Invalid parameters"
    logger.warning(f"Validation error: {detail}")
    return JSONResponse(status_code=400, content={"detail": detail})
