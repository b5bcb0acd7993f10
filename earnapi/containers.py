from dependency_injector import containers, providers

from earnapi.database.session import get_db
from earnapi.services.commission_service import CommissionService
from earnapi.services.membership_service import MembershipService
from earnapi.services.salary_service import SalaryService
from earnapi.services.settings_service import SettingsService
from earnapi.services.task_service import TaskService
from earnapi.services.wallet_service import WalletService
from earnapi.config import Settings


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(Settings)


class RepositoryModule(containers.DeclarativeContainer):
    """Database session."""

    get_db = providers.Resource(get_db)


class ServiceModule(containers.DeclarativeContainer):
    """Service layer dependencies."""

    repositories = providers.DependenciesContainer()

    settings_service = providers.Factory(SettingsService, db=repositories.get_db)
    wallet_service = providers.Factory(WalletService, db=repositories.get_db)
    membership_service = providers.Factory(MembershipService, db=repositories.get_db)
    commission_service = providers.Factory(CommissionService, db=repositories.get_db)
    salary_service = providers.Factory(SalaryService, db=repositories.get_db)
    task_service = providers.Factory(TaskService, db=repositories.get_db)


class Container(containers.DeclarativeContainer):
    """Application container (배치 스크립트 / Lambda 핸들러용)"""

    config = providers.Container(ConfigModule)
    repositories = providers.Container(RepositoryModule)
    services = providers.Container(ServiceModule, repositories=repositories)
