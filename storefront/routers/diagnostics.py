"""
Envelope smoke-check routes, mounted outside production only
"""
from fastapi import APIRouter

from storefront.utils import responses
from storefront.utils.errors import BadRequestError, NotFoundError

router = APIRouter(prefix="/test", tags=["diagnostics"])


@router.get("/success")
def test_success():
    return responses.success({"test": "data"}, "Test successful")


@router.get("/error")
def test_error():
    raise BadRequestError("This is a test error")


@router.get("/not-found")
def test_not_found():
    raise NotFoundError("Test resource not found")
