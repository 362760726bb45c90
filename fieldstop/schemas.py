from pydantic import BaseModel, field_validator
from typing import Optional, Literal

from .validation import validate_cpf, validate_rg, format_cpf, format_rg


class VehicleCreate(BaseModel):
    make: str
    model: str
    color: str


class VehicleOut(BaseModel):
    id: str
    make: str
    model: str
    color: str


class _PersonFields(BaseModel):
    name: Optional[str] = None
    mother_name: Optional[str] = None
    father_name: Optional[str] = None
    birth_date: Optional[str] = None
    rg: Optional[str] = None
    cpf: Optional[str] = None
    address: Optional[str] = None
    profile_photo: Optional[str] = None
    photos: Optional[list[str]] = None
    notes: Optional[str] = None

    @field_validator("cpf")
    @classmethod
    def validate_cpf_field(cls, v):
        if not v:
            return None
        if not validate_cpf(v):
            raise ValueError("Invalid CPF")
        return format_cpf(v)

    @field_validator("rg")
    @classmethod
    def validate_rg_field(cls, v):
        if not v:
            return None
        if not validate_rg(v):
            raise ValueError("RG must have 7 to 9 digits")
        return format_rg(v)


class PersonCreate(_PersonFields):
    vehicles: list[VehicleCreate] = []


class PersonUpdate(_PersonFields):
    pass


class PersonOut(BaseModel):
    id: str
    name: Optional[str] = None
    mother_name: Optional[str] = None
    father_name: Optional[str] = None
    birth_date: Optional[str] = None
    rg: Optional[str] = None
    cpf: Optional[str] = None
    address: Optional[str] = None
    profile_photo: Optional[str] = None
    photos: list[str] = []
    notes: Optional[str] = None
    vehicles: list[VehicleOut] = []


class Location(BaseModel):
    street: str = ""
    street_number: str = ""
    district: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @field_validator("latitude")
    @classmethod
    def validate_latitude(cls, v):
        if v is not None and not -90 <= v <= 90:
            raise ValueError("latitude must be between -90 and 90")
        return v

    @field_validator("longitude")
    @classmethod
    def validate_longitude(cls, v):
        if v is not None and not -180 <= v <= 180:
            raise ValueError("longitude must be between -180 and 180")
        return v


class ApproachCreate(BaseModel):
    timestamp: Optional[str] = None
    location: Location = Location()
    person_ids: list[str]


class ApproachUpdate(BaseModel):
    timestamp: Optional[str] = None
    location: Optional[Location] = None
    person_ids: Optional[list[str]] = None


class ApproachOut(BaseModel):
    id: str
    timestamp: str
    location: Location
    people: list[PersonOut]


class NetworkNodeOut(BaseModel):
    id: str
    label: str
    photo: Optional[str] = None
    size: int
    level: Literal[0, 1, 2]
    classification: Literal["selected", "direct", "indirect"]


class NetworkEdgeOut(BaseModel):
    source: str
    target: str
    weight: int
    approach_ids: list[str]
    is_indirect: bool


class NetworkOut(BaseModel):
    nodes: list[NetworkNodeOut]
    edges: list[NetworkEdgeOut]


class NetworkNodeDetail(BaseModel):
    person: PersonOut
    level: Literal[0, 1, 2]
    classification: Literal["selected", "direct", "indirect"]
    record_url: str
