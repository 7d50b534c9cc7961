from restopos.models.account import Account

__all__ = ["Account"]
