"""Player actions: build, sell, upgrade, abilities."""

from bastion.actions.commands import GameActions

__all__ = ["GameActions"]
