"""
sealdrop command line

    sealdrop upload report.pdf --max-downloads 3 --expiry-hours 48 --generate-password
    sealdrop info <file-id>
    sealdrop download <file-id> --password ... -o report.pdf
"""

import argparse
import getpass
import logging
import mimetypes
import os
import sys
from pathlib import Path
from typing import List, Optional

from sealdrop.domain.errors import DomainError, PasswordRequiredError

from .passwords import generate_share_password
from .share_client import ShareClient

DEFAULT_SERVER = "http://localhost:8000/api/v1"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sealdrop",
        description="Share files encrypted on this machine; the server never sees the plaintext.",
    )
    parser.add_argument(
        "--server", default=os.getenv("SEALDROP_SERVER", DEFAULT_SERVER),
        help="API base URL (default: $SEALDROP_SERVER or %(default)s)",
    )
    parser.add_argument("--owner", default=os.getenv("SEALDROP_OWNER"),
                        help="Owner id sent in the identity header")
    parser.add_argument("-v", "--verbose", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)

    upload = sub.add_parser("upload", help="Encrypt and upload a file")
    upload.add_argument("path", type=Path)
    upload.add_argument("--max-downloads", type=int, default=1)
    upload.add_argument("--expiry-hours", type=int, default=24)
    upload.add_argument("--mime-type")
    protect = upload.add_mutually_exclusive_group()
    protect.add_argument("--password")
    protect.add_argument("--generate-password", action="store_true",
                         help="Protect the share with a random password and print it")

    info = sub.add_parser("info", help="Show public metadata of a share")
    info.add_argument("file_id")

    download = sub.add_parser("download", help="Download and decrypt a share")
    download.add_argument("file_id")
    download.add_argument("--password")
    download.add_argument("-o", "--output", type=Path,
                          help="Output path (default: the original file name)")

    return parser


def _upload(client: ShareClient, args) -> int:
    content = args.path.read_bytes()
    mime_type = args.mime_type or mimetypes.guess_type(args.path.name)[0] or "application/octet-stream"
    password = generate_share_password() if args.generate_password else args.password

    result = client.upload(
        content,
        original_name=args.path.name,
        mime_type=mime_type,
        max_downloads=args.max_downloads,
        expiry_hours=args.expiry_hours,
        password=password,
    )
    print(f"File id:    {result['fileId']}")
    print(f"Share URL:  {result['shareUrl']}")
    print(f"Expires at: {result['expiresAt']} UTC")
    if args.generate_password:
        print(f"Password:   {password}")
    return 0


def _info(client: ShareClient, args) -> int:
    meta = client.info(args.file_id)
    print(f"Name:       {meta['originalName']}")
    print(f"Size:       {meta['fileSize']} bytes ({meta['mimeType']})")
    print(f"Downloads:  {meta['downloadCount']}/{meta['maxDownloads']}")
    print(f"Expires at: {meta['expiryDate']} UTC")
    print(f"Password:   {'required' if meta['requiresPassword'] else 'none'}")
    return 0


def _download(client: ShareClient, args) -> int:
    try:
        downloaded = client.download(args.file_id, args.password)
    except PasswordRequiredError:
        if not sys.stdin.isatty():
            raise
        downloaded = client.download(args.file_id, getpass.getpass("Password: "))

    output = args.output or Path(Path(downloaded.original_name).name)
    output.write_bytes(downloaded.content)
    print(
        f"Saved {len(downloaded.content)} bytes to {output} "
        f"(download {downloaded.download_count}/{downloaded.max_downloads})"
    )
    return 0


COMMANDS = {
    "upload": _upload,
    "info": _info,
    "download": _download,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    client = ShareClient(args.server, owner_id=args.owner)
    try:
        return COMMANDS[args.command](client, args)
    except DomainError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
