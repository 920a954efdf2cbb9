"""
folder-uploader: A bounded-concurrency bulk uploader for S3 buckets.

This package recursively discovers files under a set of local folders and
uploads them to an S3-compatible bucket, keeping their relative paths as
object keys, with per-file retries and live progress reporting.

The primary entry point for programmatic use is the `UploadPipeline` class.
"""

from typing import List

from folder_uploader.pipeline import UploadPipeline

__all__: List[str] = ["UploadPipeline"]
