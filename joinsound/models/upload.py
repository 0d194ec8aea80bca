"""
Bulk upload report models.
"""

from dataclasses import dataclass, field
from typing import List

STATUS_SUCCESS = "success"
STATUS_PARTIAL = "partial"
STATUS_FAILURE = "failure"


@dataclass
class UploadResult:
    """One file that was stored, with its position in the submitted batch."""

    id: str
    original_name: str
    size: int
    mime_type: str
    index: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "original_name": self.original_name,
            "size": self.size,
            "mime_type": self.mime_type,
            "index": self.index,
        }


@dataclass
class FileError:
    """One file that was rejected, with its position in the submitted batch."""

    filename: str
    error: str
    index: int

    def to_dict(self) -> dict:
        return {"filename": self.filename, "error": self.error, "index": self.index}


@dataclass
class BulkUploadReport:
    """
    Outcome of a bulk upload.

    Attributes:
        status: 'success' when every file was stored, 'partial' when some
            were, 'failure' when none were
        total_files: Number of files submitted
        successful_files: Stored files, in submission order
        failed_files: Rejected files, in submission order
        message: Human-readable summary
    """
    status: str
    total_files: int
    successful_files: List[UploadResult] = field(default_factory=list)
    failed_files: List[FileError] = field(default_factory=list)
    message: str = ""

    @property
    def success_count(self) -> int:
        return len(self.successful_files)

    @property
    def failure_count(self) -> int:
        return len(self.failed_files)

    @classmethod
    def build(cls, total_files: int, successful_files: List[UploadResult],
              failed_files: List[FileError]) -> "BulkUploadReport":
        success_count = len(successful_files)

        if success_count == total_files:
            status = STATUS_SUCCESS
            message = f"All {total_files} files uploaded successfully!"
        elif success_count > 0:
            status = STATUS_PARTIAL
            message = f"{success_count} of {total_files} files uploaded successfully"
        else:
            status = STATUS_FAILURE
            message = "No files were uploaded successfully"

        return cls(
            status=status,
            total_files=total_files,
            successful_files=list(successful_files),
            failed_files=list(failed_files),
            message=message,
        )

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "total_files": self.total_files,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "successful_files": [f.to_dict() for f in self.successful_files],
            "failed_files": [f.to_dict() for f in self.failed_files],
            "message": self.message,
        }
