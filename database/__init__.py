from .manager import DatabaseManager

# Global instance shared by the composition root
db = DatabaseManager()


def init_database() -> DatabaseManager:
    return db
