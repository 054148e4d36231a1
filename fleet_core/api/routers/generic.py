"""
Fleet core router module generic functionalities
"""

from typing import Dict

from fastapi import APIRouter

from ... import schemas


router = APIRouter(
    tags=["Generic"]
)


@router.get("/", response_model=schemas.Welcome)
async def get_welcome_message():
    """
    Return a short welcome message to verify the API is reachable
    """

    return schemas.Welcome(message="Welcome to the fleet API. Take a look at /docs for all endpoints.")


@router.get("/health", response_model=Dict[str, str])
async def verify_running_backend():
    """
    Return 200 OK with an empty object as body to only verify that the service and the middlewares work
    """

    return {}
