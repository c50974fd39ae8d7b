from pydantic import BaseModel, Field, field_validator

class ProfileImageUploadRequest(BaseModel):
    file_type: str = Field(min_length=1)

    @field_validator("file_type")
    @classmethod
    def image_only(cls, value: str) -> str:
        if not value.startswith("image/"):
            raise ValueError("Invalid file type. Only images are allowed.")
        return value

class ProfileImageUploadResponse(BaseModel):
    upload_url: str
    auth_token: str
    file_key: str
    image_url: str
    expires_in: int

class MockUploadResponse(BaseModel):
    fileId: str
    fileName: str
    contentSha1: str
