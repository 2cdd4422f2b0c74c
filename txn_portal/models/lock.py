"""Global lock row model."""

from dataclasses import dataclass


@dataclass
class GlobalLock:
    """A row lock held by a branch on behalf of a global transaction."""

    xid: str = ""
    transaction_id: str = ""
    branch_id: str = ""
    resource_id: str = ""
    table_name: str = ""
    pk: str = ""
    row_key: str = ""
    # Display strings once normalized by the fetcher
    gmt_create: str | None = None
    gmt_modified: str | None = None

    @classmethod
    def from_api_dict(cls, data: dict) -> "GlobalLock":
        def text(key: str) -> str:
            value = data.get(key)
            return "" if value is None else str(value)

        def raw_time(key: str) -> str | None:
            value = data.get(key)
            return None if value is None else str(value)

        return cls(
            xid=text("xid"),
            transaction_id=text("transactionId"),
            branch_id=text("branchId"),
            resource_id=text("resourceId"),
            table_name=text("tableName"),
            pk=text("pk"),
            row_key=text("rowKey"),
            gmt_create=raw_time("gmtCreate"),
            gmt_modified=raw_time("gmtModified"),
        )

    def delete_params(self) -> dict[str, str]:
        """Identify this lock for the delete endpoint."""
        params = {
            "xid": self.xid,
            "branchId": self.branch_id,
            "tableName": self.table_name,
            "pk": self.pk,
            "resourceId": self.resource_id,
        }
        return {k: v for k, v in params.items() if v}
