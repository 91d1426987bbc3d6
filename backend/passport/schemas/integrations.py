"""Request schemas for the government data proxies."""

from typing import Annotated, Optional

from pydantic import BaseModel, Field, model_validator

UK_POSTCODE_PATTERN = r"(?i)^[A-Z]{1,2}\d[A-Z\d]?\s?\d[A-Z]{2}$"

Latitude = Annotated[float, Field(strict=True, ge=-90, le=90)]
Longitude = Annotated[float, Field(strict=True, ge=-180, le=180)]
Postcode = Annotated[str, Field(pattern=UK_POSTCODE_PATTERN)]


class EpcRequest(BaseModel):
    uprn: Optional[str] = None
    postcode: Optional[Postcode] = None
    address: Optional[str] = None

    @model_validator(mode="after")
    def require_lookup_key(self):
        if not (self.uprn or self.postcode or self.address):
            raise ValueError("At least one of uprn, postcode, or address must be provided")
        return self


class HmlrRequest(BaseModel):
    title_number: Optional[str] = None
    uprn: Optional[str] = None
    postcode: Optional[Postcode] = None

    @model_validator(mode="after")
    def require_lookup_key(self):
        if not (self.title_number or self.uprn or self.postcode):
            raise ValueError("At least one of title_number, uprn, or postcode must be provided")
        return self


class FloodRequest(BaseModel):
    latitude: Latitude
    longitude: Longitude
    uprn: Optional[str] = None


class CrimeRequest(BaseModel):
    latitude: Latitude
    longitude: Longitude
    date: Optional[Annotated[str, Field(pattern=r"^\d{4}-\d{2}$")]] = None  # YYYY-MM
