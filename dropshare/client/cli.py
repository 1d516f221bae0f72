"""Command-line client: upload files and print a share link.

Usage:
    dropshare --api-url https://share.example.com --bucket dropshare-uploads report.pdf notes.txt

Files that fail to upload are reported and left out of the share. Nothing is
shared when every upload fails.

Exit codes:
    0: share link created
    1: no file could be uploaded, or link creation failed
    2: bad arguments or rejected files
"""

import os
import sys
import logging
import argparse

import boto3

from dropshare.constants import ENV, UploadLimits
from dropshare.client.models import UploadStatus
from dropshare.client.exceptions import FileRejectedError, LinkCreationError
from dropshare.client.link_client import LinkClient
from dropshare.client.orchestrator import UploadOrchestrator
from dropshare.client.upload_service import S3UploadService


logger = logging.getLogger(__name__)


def boto3_session(profile: str | None) -> boto3.Session:
    if profile:
        return boto3.Session(profile_name=profile)
    return boto3.Session()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dropshare',
        description=f'Upload up to {UploadLimits.MAX_FILES} files and print a link that expires in 10 minutes.',
    )
    parser.add_argument('files', nargs='+', help='Files to share')
    parser.add_argument(
        '--api-url',
        default=os.environ.get(ENV.Upload.API_URL),
        help=f'Base URL of the sharing API (default: ${ENV.Upload.API_URL})',
    )
    parser.add_argument(
        '--bucket',
        default=os.environ.get(ENV.Upload.BUCKET),
        help=f'S3 bucket receiving uploads (default: ${ENV.Upload.BUCKET})',
    )
    parser.add_argument('--aws-profile', default=None, help='AWS shared config/credentials profile name')
    parser.add_argument('--timeout', type=float, default=10.0, help='HTTP timeout in seconds (default: 10)')
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.api_url:
        parser.error(f'--api-url is required (or set {ENV.Upload.API_URL})')
    if not args.bucket:
        parser.error(f'--bucket is required (or set {ENV.Upload.BUCKET})')

    session = boto3_session(args.aws_profile)
    link_client = LinkClient(args.api_url, timeout=args.timeout)
    orchestrator = UploadOrchestrator(
        upload_service=S3UploadService(args.bucket, s3_client=session.client('s3')),
        link_client=link_client,
        complete_delay=0,
    )

    try:
        for path in args.files:
            orchestrator.add(path)
    except FileRejectedError as e:
        print(f'Error: {e}', file=sys.stderr)
        return 2

    try:
        share_id = orchestrator.upload()
    except LinkCreationError as e:
        if e.retry_after is not None:
            print(f'Error: {e} Retry in {e.retry_after}s.', file=sys.stderr)
        else:
            print(f'Error: {e}', file=sys.stderr)
        return 1

    for task in orchestrator.tasks:
        if task.progress == UploadStatus.ERROR:
            print(f'Failed to upload {task.filename}: {task.error}', file=sys.stderr)

    if share_id is None:
        print('Nothing was shared: no file could be uploaded.', file=sys.stderr)
        return 1

    print(link_client.share_url(share_id))
    return 0


if __name__ == '__main__':
    sys.exit(main())
