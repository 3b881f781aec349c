from pydantic import BaseModel


class GeocodingLocation(BaseModel):
    lat: float
    lng: float


class GeocodingGeometry(BaseModel):
    location: GeocodingLocation


class GeocodingResult(BaseModel):
    geometry: GeocodingGeometry
    formatted_address: str | None = None


class GeocodingResponse(BaseModel):
    status: str
    results: list[GeocodingResult] = []
    error_message: str | None = None
