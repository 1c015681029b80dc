from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import FileResponse

from crm.core.auth import get_current_user
from crm.core.config import settings
from crm.core.db import get_db, get_profile_picture_files
from crm.core.schemas import MessageResponse
from crm.db.datastore import JsonDocumentStore
from crm.db.files import FileStorage, read_limited
from crm.domains.identity.entities import User
from crm.domains.identity.schemas import (
    EmailChange, EmailChangeResponse, PasswordChange, ProfilePictureResponse,
    ProfileResponse, ProfileStats, ProfileUpdate, UserResponse
)
from crm.domains.identity.services import IdentityService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    current_user: User = Depends(get_current_user),
    db: JsonDocumentStore = Depends(get_db)
):
    """Профиль текущего пользователя с количеством его записей"""
    profile = await IdentityService(db).get_profile(current_user.id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    user, stats = profile
    return ProfileResponse(user=UserResponse.from_entity(user), stats=ProfileStats(**stats))


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    update_data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: JsonDocumentStore = Depends(get_db)
):
    """Обновление профиля"""
    user = await IdentityService(db).update_profile(
        current_user.id,
        full_name=update_data.full_name,
        phone=update_data.phone,
        dark_mode=update_data.dark_mode
    )
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.from_entity(user)


@router.put("/profile/email", response_model=EmailChangeResponse)
async def change_email(
    email_data: EmailChange,
    current_user: User = Depends(get_current_user),
    db: JsonDocumentStore = Depends(get_db)
):
    """Смена email"""
    try:
        user = await IdentityService(db).change_email(
            current_user.id, email_data.email, email_data.password
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"message": "Email updated successfully", "email": user.email}


@router.put("/profile/password", response_model=MessageResponse)
async def change_password(
    password_data: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: JsonDocumentStore = Depends(get_db)
):
    """Смена пароля"""
    try:
        changed = await IdentityService(db).change_password(
            current_user.id, password_data.current_password, password_data.new_password
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not changed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"message": "Password updated successfully"}


@router.post("/profile/picture", response_model=ProfilePictureResponse)
async def upload_profile_picture(
    picture: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: JsonDocumentStore = Depends(get_db),
    files: FileStorage = Depends(get_profile_picture_files)
):
    """Загрузка фото профиля"""
    try:
        content = await read_limited(picture, settings.max_profile_picture_size)
        picture_url = await IdentityService(db).set_profile_picture(
            current_user.id, content, picture.filename, picture.content_type, files
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not picture_url:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return ProfilePictureResponse(
        message="Profile picture uploaded successfully", profile_picture=picture_url
    )


@router.get("/profile-pictures/{file_name}")
async def get_profile_picture(
    file_name: str,
    files: FileStorage = Depends(get_profile_picture_files)
):
    """Отдача фото профиля"""
    path = files.path_for(file_name)
    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return FileResponse(path)


@router.delete("/profile", response_model=MessageResponse)
async def delete_profile(
    current_user: User = Depends(get_current_user),
    db: JsonDocumentStore = Depends(get_db),
    files: FileStorage = Depends(get_profile_picture_files)
):
    """Удаление собственного профиля"""
    deleted = await IdentityService(db).delete_account(current_user.id, files)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"message": "Profile deleted successfully"}
