from flasharb.types.aliases import ChainId

__all__ = ("ChainId",)
