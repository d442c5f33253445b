"""Convenience exports for service layer."""
from .auth_service import (
    authenticate_user,
    create_access_token,
    decode_access_token,
    ensure_default_admin,
    get_current_user,
    register_user,
    require_admin,
    require_roles,
)
from .catalog_service import (
    create_brand,
    create_category,
    delete_brand,
    delete_category,
    get_brand,
    get_category,
    list_brands,
    list_categories,
    list_categories_by_brand,
    update_brand,
    update_category,
)
from .chat_service import answer_question
from .document_store import DocumentStore, get_document_store, set_document_store
from .ingestion_service import (
    IngestionError,
    IngestionStage,
    ManualUpload,
    register_personal_model,
    register_public_model,
    validate_manual_upload,
)
from .manual_service import (
    delete_manual_for_model,
    get_manual,
    list_manuals_for_uploader,
    load_manual_file,
)
from .name_validator import ModelNameError, NameRejection, ensure_model_name_available, validate_model_name
from .product_model_service import (
    delete_model_by_admin,
    delete_personal_model,
    get_model,
    list_all_models,
    list_public_models,
    list_public_models_by_category,
    list_user_models,
    update_personal_model,
    update_public_model,
)

__all__ = [
    "authenticate_user",
    "register_user",
    "create_access_token",
    "decode_access_token",
    "ensure_default_admin",
    "get_current_user",
    "require_admin",
    "require_roles",
    "create_brand",
    "create_category",
    "delete_brand",
    "delete_category",
    "get_brand",
    "get_category",
    "list_brands",
    "list_categories",
    "list_categories_by_brand",
    "update_brand",
    "update_category",
    "answer_question",
    "DocumentStore",
    "get_document_store",
    "set_document_store",
    "IngestionError",
    "IngestionStage",
    "ManualUpload",
    "register_personal_model",
    "register_public_model",
    "validate_manual_upload",
    "delete_manual_for_model",
    "get_manual",
    "list_manuals_for_uploader",
    "load_manual_file",
    "ModelNameError",
    "NameRejection",
    "ensure_model_name_available",
    "validate_model_name",
    "delete_model_by_admin",
    "delete_personal_model",
    "get_model",
    "list_all_models",
    "list_public_models",
    "list_public_models_by_category",
    "list_user_models",
    "update_personal_model",
    "update_public_model",
]
