from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Literal, Optional

IMAGE_MIME_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")
VIDEO_MIME_TYPES = ("video/mp4", "video/webm", "video/quicktime")

class PostCreate(BaseModel):
    content: str = Field(max_length=5000)
    image_url: Optional[str] = Field(default=None, max_length=2048)
    video_url: Optional[str] = Field(default=None, max_length=2048)
    is_subscriber_only: bool = False

    @field_validator("content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Post content is required")
        return value

    @field_validator("image_url", "video_url", mode="before")
    @classmethod
    def empty_as_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def one_media_item(self):
        if not self.image_url and not self.video_url:
            raise ValueError("Post must have either an image or video")
        if self.image_url and self.video_url:
            raise ValueError("Post cannot have both image and video")
        return self

class PostRead(BaseModel):
    id: UUID
    creator_id: UUID
    creator_name: Optional[str] = None
    creator_image: Optional[str] = None
    content: str
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    is_subscriber_only: bool
    likes: int = 0
    comments: int = 0
    created_at: Optional[datetime] = None

class PostResponse(BaseModel):
    post: PostRead

class PostMediaUploadRequest(BaseModel):
    file_type: str = Field(min_length=1)
    media_type: Literal["image", "video"]

    @model_validator(mode="after")
    def allowed_mime(self):
        if self.media_type == "image" and self.file_type not in IMAGE_MIME_TYPES:
            raise ValueError("Invalid image type. Allowed: jpeg, png, webp, gif")
        if self.media_type == "video" and self.file_type not in VIDEO_MIME_TYPES:
            raise ValueError("Invalid video type. Allowed: mp4, webm, mov")
        return self

class PostMediaUploadResponse(BaseModel):
    upload_url: str
    auth_token: str
    file_key: str
    public_url: str
    expires_in: int

class Feed(BaseModel):
    posts: List[PostRead]
    page: int
    limit: int
    has_more: bool
