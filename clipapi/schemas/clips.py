from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ClipRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: Optional[str] = None
    start_time: Optional[str] = Field(None, alias="startTime")
    end_time: Optional[str] = Field(None, alias="endTime")

    def missing_fields(self) -> List[str]:
        fields = {
            "url": self.url,
            "startTime": self.start_time,
            "endTime": self.end_time,
        }
        return [name for name, value in fields.items() if not value or not value.strip()]


class ClipResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    file_path: str = Field(alias="filePath")
    message: str = "Video section processed successfully"


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
