"""People directory search across employee profiles and user accounts."""

from collections.abc import Sequence

from fedsearch.common.config import Settings
from fedsearch.common.models import Employee, User
from fedsearch.search.repositories.protocols import DirectoryQuery
from fedsearch.search.strategies.base import BaseStrategy
from fedsearch.search.types import Author, EmployeeMetadata, FederatedSearchParams, SearchResult, SearchSource

UNKNOWN_DEPARTMENT = "Unknown Department"


class DirectoryStrategy(BaseStrategy):
    """Profiles match on job title or location, bare accounts on name.

    An account is only reported when no profile hit already covers that person.
    """

    source = SearchSource.EMPLOYEES

    def __init__(self, repository: DirectoryQuery, config: Settings | None = None) -> None:
        super().__init__(config)
        self._repository = repository

    async def run(
        self,
        query: str,
        embedding: Sequence[float] | None,
        params: FederatedSearchParams,
    ) -> list[SearchResult]:
        limit = self._limit(params)
        results: list[SearchResult] = []
        people: set[str] = set()

        employees = await self._repository.find_employees(query, limit, organization_id=params.organization_id)
        for employee in employees:
            if employee.user is None:
                continue
            results.append(self._profile_hit(employee, employee.user))
            people.add(str(employee.user.id))

        users = await self._repository.find_users(query, limit, organization_id=params.organization_id)
        for user in users:
            if str(user.id) in people:
                continue
            results.append(self._account_hit(user))
            people.add(str(user.id))

        return results

    def _profile_hit(self, employee: Employee, user: User) -> SearchResult:
        name = user.full_name or user.email
        department = employee.department.name if employee.department else None
        return SearchResult(
            id=f"employee-{employee.id}",
            source=SearchSource.EMPLOYEES,
            source_id=str(employee.id),
            title=name,
            excerpt=f"{employee.job_title or ''} - {department or UNKNOWN_DEPARTMENT}",
            thumbnail_url=user.avatar_url,
            url=f"/diq/people?id={employee.id}",
            author=Author(id=str(user.id), name=name, avatar_url=user.avatar_url),
            score=self._settings.employee_score,
            metadata=EmployeeMetadata(
                job_title=employee.job_title,
                department=department,
                location=employee.location,
                email=user.email,
            ),
        )

    def _account_hit(self, user: User) -> SearchResult:
        name = user.full_name or user.email
        return SearchResult(
            id=f"user-{user.id}",
            source=SearchSource.EMPLOYEES,
            source_id=str(user.id),
            title=name,
            excerpt=user.email,
            thumbnail_url=user.avatar_url,
            url=f"/diq/people?userId={user.id}",
            author=Author(id=str(user.id), name=name, avatar_url=user.avatar_url),
            score=self._settings.user_score,
        )
