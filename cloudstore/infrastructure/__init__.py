"""
Infrastructure layer - external service integrations.

- storage: Object storage backends (S3/MinIO/R2 via boto3, in-memory mock)

These wrappers translate between SDK types and our core models and errors.
"""
