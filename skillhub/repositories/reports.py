import abc
from typing import List, Optional

from skillhub.models.report import ReportInSession
from skillhub.repositories.base import Repository, SqlRepository, _raw


class ReportRepository(Repository):

    @abc.abstractmethod
    def list_reports(self, status: Optional[str] = None) -> List[ReportInSession]:
        ...


class SqlReportRepository(SqlRepository, ReportRepository):
    model = ReportInSession

    def list_reports(self, status=None):
        query = self.db.query(ReportInSession)
        if status:
            query = query.filter(ReportInSession.status == _raw(status))
        return query.order_by(ReportInSession.id.desc()).all()
