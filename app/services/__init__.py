"""
Business logic service layer.
Provides high-level business operations using repositories and third-party clients.
"""
from .base_service import BaseService
from .account_service import AccountService
from .ai_service import AIService
from .speech_service import SpeechRecognitionService
from .storage_service import ObjectStorageService
from .upload_service import UploadService

__all__ = [
    'BaseService',
    'AccountService',
    'AIService',
    'SpeechRecognitionService',
    'ObjectStorageService',
    'UploadService'
]
