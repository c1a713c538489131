from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from qrhunt.models import Code


class ScanRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str
    group_name: str = Field(..., alias="groupName", min_length=1, max_length=200)


class ScanResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code_found: Code | None = Field(..., alias="codeFound")
    scanned_first: bool = Field(..., alias="scannedFirst")


class CreateCodeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    description: str = Field(..., min_length=1, max_length=500)
    points: int = Field(..., ge=0)
    signing_key: str = Field(..., alias="signingKey")


# Request/response shapes used by the original browser client under /api.


class LegacyAddPointsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    jwt_scanned: str = Field(..., alias="jwtScanned")
    group_name: str = Field(..., alias="groupName", min_length=1, max_length=200)


class LegacyScanResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    qr_code_found: Code | None = Field(..., alias="qrCodeFound")
    scanned_first: bool = Field(..., alias="scannedFirst")


class LegacyCreateCodeRequest(BaseModel):
    description: str = Field(..., min_length=1, max_length=500)
    points: int = Field(..., ge=0)
    key: str
