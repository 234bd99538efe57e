"""
Screen components for the KaosNet Console.

Screens are full-window views that are pushed onto and popped from the
application's screen stack.

Available Screens:
    LoginScreen: Operator login form.
    DashboardScreen: Server status and navigation.
    PlayersScreen: Searchable, paginated player list.
    PlayerDetailScreen: Player profile with ban/unban/delete.
    StorageScreen: Storage collections and objects.
    StorageObjectDetailScreen: One storage object with delete.
    CreateStorageObjectScreen: Form for writing a storage object.
    AuthTestScreen: Device, email and social authentication tester.
"""

from kaos_console.screens.auth_test import AuthTestScreen
from kaos_console.screens.create_storage_object import CreateStorageObjectScreen
from kaos_console.screens.dashboard import DashboardScreen
from kaos_console.screens.login import LoginScreen
from kaos_console.screens.player_detail import PlayerDetailScreen
from kaos_console.screens.players import PlayersScreen
from kaos_console.screens.storage import StorageScreen
from kaos_console.screens.storage_detail import StorageObjectDetailScreen

__all__ = [
    "AuthTestScreen",
    "CreateStorageObjectScreen",
    "DashboardScreen",
    "LoginScreen",
    "PlayerDetailScreen",
    "PlayersScreen",
    "StorageObjectDetailScreen",
    "StorageScreen",
]
