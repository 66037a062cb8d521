from pydantic import BaseModel, ConfigDict, Field


class UploadResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    filename: str
    view_url: str = Field(alias="viewUrl")
    qr_data_url: str = Field(alias="qrDataUrl")


class ErrorResponse(BaseModel):
    error: str
    code: str


class HealthStatus(BaseModel):
    ok: bool = True
