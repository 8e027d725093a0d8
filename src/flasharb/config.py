import tomllib
from pathlib import Path
from typing import Annotated, Any

import tomlkit
from pydantic import (
    BaseModel,
    BeforeValidator,
    HttpUrl,
    PlainSerializer,
    SecretStr,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from flasharb.arbitrage.builder import HopOrder
from flasharb.constants import (
    DODO_V2_WETH_POOL,
    POLYGON_CHAIN_ID,
    POLYGON_USDC,
    POLYGON_WETH,
    USDC_DECIMALS,
    WETH_DECIMALS,
)
from flasharb.logging import logger
from flasharb.types.aliases import ChainId
from flasharb.validation.evm_values import (
    ValidatedAddress,
    ValidatedDecimals,
    ValidatedUint256,
    ValidatedUint256NonZero,
)
from flasharb.venues import Venue

CONFIG_DIR = Path.home() / ".config" / "flasharb"
CONFIG_FILE = CONFIG_DIR / "config.toml"


def _venue_from_name(value: Any) -> Any:
    if isinstance(value, str) and not value.isdigit():
        try:
            return Venue[value.upper()]
        except KeyError:
            raise ValueError(f"Unknown venue {value!r}") from None
    return value


# Venues are written to the config file by name
ConfiguredVenue = Annotated[
    Venue,
    BeforeValidator(_venue_from_name),
    PlainSerializer(lambda venue: venue.name, return_type=str),
]


class LoanSettings(BaseModel):
    contract: ValidatedAddress | None = None
    pool: ValidatedAddress = DODO_V2_WETH_POOL
    amount: ValidatedUint256NonZero = 5 * 10**17
    asset_decimals: ValidatedDecimals = WETH_DECIMALS


class GasSettings(BaseModel):
    limit: ValidatedUint256NonZero = 3_000_000
    price: ValidatedUint256 = 300 * 10**9


class Settings(BaseSettings):
    """
    Runtime configuration, built once at startup and passed to the workflow.

    Values are read from keyword arguments (usually the contents of the config file) and from
    environment variables prefixed with `FLASHARB_`, e.g. `FLASHARB_PRIVATE_KEY` or
    `FLASHARB_GAS__PRICE`. Amounts are integers in the token's base units.
    """

    model_config = SettingsConfigDict(
        env_prefix="FLASHARB_",
        env_nested_delimiter="__",
    )

    rpc: HttpUrl | Path | None = None
    chain_id: ChainId = POLYGON_CHAIN_ID
    venues: list[ConfiguredVenue] = [Venue.SUSHISWAP, Venue.QUICKSWAP, Venue.APESWAP]

    base_token: ValidatedAddress = POLYGON_WETH
    base_token_decimals: ValidatedDecimals = WETH_DECIMALS
    quote_token: ValidatedAddress = POLYGON_USDC
    quote_token_decimals: ValidatedDecimals = USDC_DECIMALS

    min_spread: ValidatedUint256 = 10 * 10**USDC_DECIMALS
    hop_order: HopOrder = HopOrder.RICH_FIRST

    loan: LoanSettings = LoanSettings()
    gas: GasSettings = GasSettings()

    private_key: SecretStr | None = None

    @field_validator("rpc", mode="after")
    def validate_path(
        cls,  # noqa: N805
        endpoint: HttpUrl | Path | None,
    ) -> HttpUrl | Path | None:
        """
        Convert an IPC socket path to an absolute reference, leaving HTTP URLs as-is.
        """

        return endpoint.expanduser().absolute() if isinstance(endpoint, Path) else endpoint

    @field_validator("venues", mode="after")
    def validate_venues(
        cls,  # noqa: N805
        venues: list[Venue],
    ) -> list[Venue]:
        if len(set(venues)) != len(venues):
            raise ValueError("Each venue may only be listed once.")
        return venues


def load_config_from_file(config_path: Path) -> Settings:
    return Settings(
        **tomllib.loads(
            config_path.read_text(),
        ),
    )


def save_config_to_file(config: Settings, config_path: Path = CONFIG_FILE) -> None:
    """
    Write the settings as TOML. The private key is never written.
    """

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        tomlkit.dumps(
            config.model_dump(
                mode="json",
                exclude={"private_key"},
                exclude_none=True,
            ),
        ),
    )
    logger.info(f"Saved configuration to {config_path}.")


def load_settings(config_path: Path | None = None) -> Settings:
    """
    Load settings from the config file, or build the defaults if the file does not exist.
    """

    config_path = config_path if config_path is not None else CONFIG_FILE

    if config_path.exists():
        return load_config_from_file(config_path)

    logger.debug(f"No configuration file at {config_path}, using defaults.")
    return Settings()
