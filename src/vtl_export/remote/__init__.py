"""Remote AppSync API: capability contract and boto3 adapter."""

from vtl_export.remote.appsync import Boto3AppSyncApi, create_appsync_client
from vtl_export.remote.protocol import AppSyncApi

__all__ = ["AppSyncApi", "Boto3AppSyncApi", "create_appsync_client"]
