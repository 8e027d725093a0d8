from typing import TypeAlias

ChainId: TypeAlias = int
