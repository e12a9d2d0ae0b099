from pydantic import BaseModel, ConfigDict, Field


class RelayRequest(BaseModel):
    """Request payload for the relay endpoint.

    Attributes:
        message: User's text for this turn.
        image_url: Optional ``data:<mime>;base64,<payload>`` image.
    """

    model_config = ConfigDict(populate_by_name=True)

    message: str
    image_url: str | None = Field(None, alias="imageUrl")


class RelayResponse(BaseModel):
    """Successful relay reply."""

    response: str


class RelayErrorResponse(BaseModel):
    """Relay failure body, returned with a 500 status."""

    error: str
