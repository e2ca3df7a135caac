from quotes_api.api.schemas.activity import ActivityListResponse, ActivityResponse
from quotes_api.api.schemas.admin import (
    QuoteExportResponse,
    QuoteImportRequest,
    QuoteImportResponse,
    StatsResponse,
)
from quotes_api.api.schemas.common import ERROR_RESPONSES, MessageResponse, PaginationMeta
from quotes_api.api.schemas.quote import (
    QuoteCreate,
    QuoteEnvelope,
    QuoteListResponse,
    QuoteResponse,
    QuoteUpdate,
)
from quotes_api.api.schemas.user import (
    AccountEnvelope,
    AccountResponse,
    AdminUserUpdate,
    FavoritesResponse,
    FavoriteToggleResponse,
    ProfileUpdate,
    UserDetailResponse,
    UserEnvelope,
    UserListResponse,
    UserProfileResponse,
    VerifyResponse,
)
