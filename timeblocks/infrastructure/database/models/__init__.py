# Imported for side effects: registers every table on BaseModel.metadata.
from timeblocks.infrastructure.database.models.one_time_code_model import OneTimeCodeModel  # noqa: F401
from timeblocks.infrastructure.database.models.refresh_token_model import RefreshTokenModel  # noqa: F401
from timeblocks.infrastructure.database.models.user_model import UserModel  # noqa: F401
