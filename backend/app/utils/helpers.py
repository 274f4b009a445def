"""업로드 파일 검증/저장 공용 헬퍼입니다."""

import os
import uuid
from fastapi import UploadFile

from app.config import settings
from app.errors import PayloadTooLarge, ValidationFailed


def file_extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else ""


def validate_file(file: UploadFile) -> None:
    ext = file_extension(file.filename)
    if ext not in settings.ALLOWED_EXTENSIONS:
        raise ValidationFailed(
            f"'{ext}' 형식은 업로드할 수 없습니다. 허용 확장자: {', '.join(settings.ALLOWED_EXTENSIONS)}",
            code="INVALID_FILE_TYPE",
        )


async def save_upload(file: UploadFile, subfolder: str = "") -> dict:
    validate_file(file)
    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise PayloadTooLarge(f"파일은 최대 {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB까지 업로드할 수 있습니다.")

    folder = os.path.join(settings.UPLOAD_DIR, subfolder)
    os.makedirs(folder, exist_ok=True)

    stored_name = f"{uuid.uuid4().hex}.{file_extension(file.filename)}"
    path = os.path.join(folder, stored_name)

    with open(path, "wb") as f:
        f.write(content)

    return {
        "filename": file.filename,
        "stored_name": stored_name,
        "url": f"/uploads/{subfolder}/{stored_name}".replace("\\", "/"),
        "size": len(content),
    }
