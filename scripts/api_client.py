#!/usr/bin/env python3
"""
CLI client for the local page capture endpoints.

Usage:
    uv run scripts/api_client.py --help
    uv run scripts/api_client.py screenshot --target-url https://example.com --path shots/example.png
    uv run scripts/api_client.py screenshot --target-url https://example.com --path shots/full.png --full-page --wait 3
    uv run scripts/api_client.py compare --base-path a.png --target-path b.png --destination-path diffs/a-b.png

Environment Variables:
    API_URL: Base URL for the local server (default: http://localhost:8000)
"""

import argparse
import json
import os
import sys
from typing import Any
import httpx

# Default configuration
DEFAULT_API_URL = os.getenv('API_URL', 'http://localhost:8000')


class APIClient:
    """Client for the screenshot and compare-images endpoints."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')
        # screenshots can take a while: browser launch, page load and settle time
        self.client = httpx.Client(timeout=180.0)

    def _handle_response(self, response: httpx.Response) -> Any:
        """Handle API response and print errors."""
        try:
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            error_text = e.response.text
            try:
                # Try to pretty print error response if it's JSON
                error_json = json.loads(error_text)
                error_text = json.dumps(error_json, indent=2)
            except (json.JSONDecodeError, ValueError):
                # If not JSON, use as-is
                pass
            print(f'❌ HTTP {e.response.status_code}:\n{error_text}')
            sys.exit(1)
        except Exception as e:
            print(f'❌ Error: {e}')
            sys.exit(1)

    def screenshot(
        self,
        url: str,
        path: str,
        scale_factor: int | None = None,
        viewport_width: int | None = None,
        viewport_height: int | None = None,
        wait: int | None = None,
        full_page: bool = False
    ) -> dict[str, Any]:
        """Capture a screenshot of a URL."""
        params: dict[str, Any] = {'url': url, 'path': path}

        optional = {
            'scale_factor': scale_factor,
            'viewport_width': viewport_width,
            'viewport_height': viewport_height,
            'wait': wait,
        }
        params.update({k: v for k, v in optional.items() if v is not None})

        # presence-based flag
        if full_page:
            params['full_page'] = ''

        response = self.client.get(f'{self.base_url}/screenshot', params=params)
        return self._handle_response(response)

    def compare(self, base_path: str, target_path: str, destination_path: str) -> dict[str, Any]:
        """Diff two images."""
        response = self.client.get(
            f'{self.base_url}/compare-images',
            params={
                'base_path': base_path,
                'target_path': target_path,
                'destination_path': destination_path,
            }
        )
        return self._handle_response(response)


def print_json(data: Any, indent: int = 2) -> None:
    """Pretty print JSON data."""
    print(json.dumps(data, indent=indent))


def main():
    parser = argparse.ArgumentParser(
        description='CLI client for the page capture endpoints',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        '--url',
        default=DEFAULT_API_URL,
        help=f'API base URL (default: {DEFAULT_API_URL})'
    )

    subparsers = parser.add_subparsers(dest='command', required=True, help='Command to execute')

    # Screenshot
    screenshot_parser = subparsers.add_parser('screenshot', help='Capture a screenshot of a URL')
    screenshot_parser.add_argument('--target-url', required=True, help='Page to capture')
    screenshot_parser.add_argument('--path', required=True, help='Destination key for the PNG')
    screenshot_parser.add_argument('--scale-factor', type=int, help='Device scale factor (default: 2)')
    screenshot_parser.add_argument('--viewport-width', type=int, help='Viewport width (default: 1400)')
    screenshot_parser.add_argument('--viewport-height', type=int, help='Viewport height (default: 900)')
    screenshot_parser.add_argument('--wait', type=int, help='Seconds to wait after load (default: 1)')
    screenshot_parser.add_argument('--full-page', action='store_true', help='Capture the full scrollable page')

    # Compare
    compare_parser = subparsers.add_parser('compare', help='Diff two images')
    compare_parser.add_argument('--base-path', required=True, help='Local path or key of the base image')
    compare_parser.add_argument('--target-path', required=True, help='Local path or key of the target image')
    compare_parser.add_argument('--destination-path', required=True, help='Destination key for the diff PNG')

    args = parser.parse_args()

    # Initialize client
    client = APIClient(args.url)

    # Execute command
    try:
        if args.command == 'screenshot':
            result = client.screenshot(
                url=args.target_url,
                path=args.path,
                scale_factor=args.scale_factor,
                viewport_width=args.viewport_width,
                viewport_height=args.viewport_height,
                wait=args.wait,
                full_page=args.full_page
            )
            print('✅ Screenshot captured')
            print_json(result)

        elif args.command == 'compare':
            result = client.compare(
                base_path=args.base_path,
                target_path=args.target_path,
                destination_path=args.destination_path
            )
            print('✅ Comparison generated')
            print_json(result)

    except KeyboardInterrupt:
        print('\n⚠️  Interrupted')
        sys.exit(1)


if __name__ == '__main__':
    main()
