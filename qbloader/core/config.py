import os
from pydantic_settings import BaseSettings


QUESTION_SETS_DIR = os.getenv("QUESTION_SETS_DIR", "data/question_sets")
TOURNAMENTS_DIR = os.getenv("TOURNAMENTS_DIR", "data/tournaments")

EDITIONS_FOLDER = "editions"
PACKETS_FOLDER = "packet_files"
GAMES_FOLDER = "game_files"
INDEX_FILE = "index.json"
BUZZES_FILE = "buzzes.csv"
BONUSES_FILE = "bonuses.csv"

IGNORED_SUFFIXES = ("DS_Store", "zip")


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///database.db"
    BASE_PATH: str = "./"
    SUBCATEGORY_MAP_PATH: str | None = None
    # plausible round/packet numbers embedded in file names
    PACKET_NUMBER_MIN: int = 1
    PACKET_NUMBER_MAX: int = 24
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
