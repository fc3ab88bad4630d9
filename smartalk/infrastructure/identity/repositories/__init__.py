from .user_directory_repository import UserDirectoryRepository

__all__ = ["UserDirectoryRepository"]
