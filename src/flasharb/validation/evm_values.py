from typing import Annotated, TypeAlias

from pydantic import AfterValidator, Field

from flasharb.checksum_cache import get_checksum_address
from flasharb.constants import MAX_UINT256, MIN_UINT256

# Integer validation is lax, values may arrive as strings from environment variables
ValidatedAddress: TypeAlias = Annotated[str, AfterValidator(get_checksum_address)]
ValidatedDecimals: TypeAlias = Annotated[int, Field(ge=0, le=77)]
ValidatedUint256: TypeAlias = Annotated[int, Field(ge=MIN_UINT256, le=MAX_UINT256)]
ValidatedUint256NonZero: TypeAlias = Annotated[int, Field(gt=MIN_UINT256, le=MAX_UINT256)]
