from pydantic import BaseModel


class GenerateResponse(BaseModel):
    success: bool = True
    result: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class HealthResponse(BaseModel):
    status: str
    service: str
