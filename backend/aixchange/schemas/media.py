"""Media Schemas — image generation request and upload/generation responses."""

from pydantic import Field

from aixchange.schemas.common import ApiInput, ApiOutput


class GenerateImageRequest(ApiInput):
    description: str | None = None
    title: str | None = None
    solution_id: str | None = None


class ImageDetails(ApiOutput):
    size: str
    format: str
    location: str


class GeneratedImage(ApiOutput):
    image_url: str
    status: str = "success"
    message: str = "Image generated and saved successfully"
    filename: str
    details: ImageDetails


class UploadedFile(ApiOutput):
    url: str
    filename: str
    status: str = "success"
    message: str = Field("File uploaded successfully")
