"""Customer record models matching the Users API wire format."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _WireModel(BaseModel):
    """Base for payloads received from the API; unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Login(_WireModel):
    uuid: str = Field(..., min_length=1, description="Stable customer identifier")
    username: str = ""
    password: str | None = None


class Name(_WireModel):
    title: str = ""
    first: str = ""
    last: str = ""


class Street(_WireModel):
    number: int = 0
    name: str = ""


class Coordinates(_WireModel):
    latitude: float = 0.0
    longitude: float = 0.0

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _parse_numeric_string(cls, value: object) -> object:
        # The API serialises coordinates as strings
        if isinstance(value, str):
            return float(value) if value.strip() else 0.0
        return value


class Timezone(_WireModel):
    offset: str = ""
    description: str = ""


class Location(_WireModel):
    street: Street = Field(default_factory=Street)
    city: str = ""
    state: str = ""
    country: str = ""
    postcode: str = ""
    coordinates: Coordinates | None = None
    timezone: Timezone | None = None

    @field_validator("postcode", mode="before")
    @classmethod
    def _postcode_as_string(cls, value: object) -> object:
        if isinstance(value, int):
            return str(value)
        return value


class DatedAge(_WireModel):
    """Date with derived age, used for both date of birth and registration."""

    date: str = ""
    age: int = 0


class Picture(_WireModel):
    large: str = ""
    medium: str = ""
    thumbnail: str = ""


class Customer(_WireModel):
    """A customer ("user") record as served by the Users API.

    ``login.uuid`` is the identity: it never changes and is the only key
    used to correlate a list row with an update or delete.
    """

    login: Login
    name: Name = Field(default_factory=Name)
    gender: str = ""
    location: Location = Field(default_factory=Location)
    email: str = ""
    dob: DatedAge = Field(default_factory=DatedAge)
    registered: DatedAge = Field(default_factory=DatedAge)
    phone: str = ""
    cell: str = ""
    picture: Picture = Field(default_factory=Picture)
    nat: str = Field(default="", description="Nationality code")

    @property
    def id(self) -> str:
        return self.login.uuid

    @property
    def full_name(self) -> str:
        return f"{self.name.first} {self.name.last}".strip()


class UsersPage(_WireModel):
    """One page of the ``GET /users`` envelope."""

    page: int = 1
    per_page: int = Field(default=10, alias="perPage")
    total: int = Field(..., ge=0)
    data: list[Customer]
    span: str | None = None
    effective_page: int | None = Field(default=None, alias="effectivePage")


class NewLogin(BaseModel):
    username: str = Field(..., min_length=1)
    password: str | None = None


class NewName(BaseModel):
    first: str = Field(..., min_length=1)
    last: str = Field(..., min_length=1)
    title: str | None = None


class NewLocation(BaseModel):
    street: Street | None = None
    city: str
    state: str | None = None
    country: str | None = None
    postcode: str | None = None


class CustomerCreate(BaseModel):
    """Request model for ``POST /users``."""

    email: str = Field(..., min_length=3, pattern=r".+@.+")
    login: NewLogin
    name: NewName
    gender: str | None = None
    location: NewLocation | None = None


class MutationResult(_WireModel):
    """Acknowledgement returned by POST, PUT and DELETE."""

    success: bool
    message: str = ""
    uuid: str | None = None
