from . import account, balance, contract, fhecounter, simple, voting

# Order in which task groups appear in --help
COMMAND_MODULES = (account, balance, contract, simple, fhecounter, voting)

__all__ = ["COMMAND_MODULES"]
