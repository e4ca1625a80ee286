from dataclasses import dataclass

from person_api.core.services import DbSessionService
from person_api.runtime.config.config_data import ConfigData


@dataclass
class ApplicationDependencies:
    config: ConfigData
    database_service: DbSessionService
