#!/usr/bin/env python3
"""
WAGMI Service CLI Client

A command-line interface for interacting with the wagmi service API
running on a Kubernetes cluster or using the wagmi library directly.
It also drives the smoke test suite and the load generator.
"""

import sys
import json
import click
import requests
from urllib.parse import urljoin

from wagmi_lib import add as wagmi_lib_add, WagmiException
from cli.loadgen import LoadGenerator, format_report
from cli.smoke import run_smoke_tests, run_burst

DEFAULT_URL = 'http://localhost:3000'


class WagmiServiceClient:
    """Client for interacting with the wagmi service API."""

    def __init__(self, base_url, session=None, timeout=5):
        """
        Initialize the client with the base URL of the wagmi service.

        Args:
            base_url (str): The base URL of the wagmi service API
            session (requests.Session): Optional session to reuse connections
            timeout (float): Per-request timeout in seconds
        """
        self.base_url = base_url
        # Ensure the base URL ends with a slash
        if not self.base_url.endswith('/'):
            self.base_url += '/'
        self.session = session or requests.Session()
        self.timeout = timeout

    def check_health(self):
        """
        Check if the wagmi service is healthy.

        Returns:
            bool: True if the service is healthy, False otherwise
        """
        try:
            url = urljoin(self.base_url, 'health')
            response = self.session.get(url, timeout=self.timeout)
            return response.status_code == 200
        except requests.exceptions.RequestException:
            return False

    def post_wagmi(self, payload=None):
        """
        Send a raw request to POST /wagmi.

        Args:
            payload (dict or None): JSON body, or None to send an empty body

        Returns:
            requests.Response: The service response
        """
        url = urljoin(self.base_url, 'wagmi')
        data = json.dumps(payload) if payload is not None else ''
        headers = {'Content-Type': 'application/json'}
        return self.session.post(url, data=data, headers=headers, timeout=self.timeout)

    def ping(self):
        """
        Ask the service for its greeting.

        Returns:
            dict: The greeting payload

        Raises:
            ValueError: If the API returns an error
            ConnectionError: If the service cannot be reached
        """
        try:
            response = self.post_wagmi()
        except requests.exceptions.RequestException as e:
            raise ConnectionError(f"Failed to connect to wagmi service: {e}")

        if response.status_code != 200:
            raise ValueError(f"API Error: {_error_message(response)}")
        return response.json()

    def add(self, a, b):
        """
        Add two numbers using the wagmi service API.

        Args:
            a (float): First number
            b (float): Second number

        Returns:
            float: The result of adding a and b

        Raises:
            ValueError: If the API returns an error
            ConnectionError: If the service cannot be reached
        """
        try:
            response = self.post_wagmi({'a': a, 'b': b})
        except requests.exceptions.RequestException as e:
            raise ConnectionError(f"Failed to connect to wagmi service: {e}")

        if response.status_code == 200:
            return response.json()['result']
        raise ValueError(f"API Error: {_error_message(response)}")


def _error_message(response):
    try:
        return response.json().get('error', 'Unknown error')
    except ValueError:
        return f"HTTP {response.status_code}"


def _fail(message):
    click.echo(click.style(f"❌ {message}", fg="red"))
    sys.exit(1)


url_option = click.option('--url', '-u', envvar='WAGMI_URL', default=DEFAULT_URL,
                          show_default=True, help='Base URL of the wagmi service API')


@click.group()
def cli():
    """Command-line interface for the Kubernetes wagmi service."""
    pass


@cli.command()
@url_option
def health(url):
    """Check if the wagmi service is healthy."""
    client = WagmiServiceClient(url)
    if client.check_health():
        click.echo(click.style("✅ WAGMI service is healthy", fg="green"))
    else:
        _fail("WAGMI service is not healthy")


@cli.command()
@url_option
def ping(url):
    """Request the greeting from the wagmi service."""
    client = WagmiServiceClient(url)
    try:
        greeting = client.ping()
    except (ValueError, ConnectionError) as e:
        _fail(e)
    click.echo(click.style(
        f"{greeting['message']} from {greeting['lang']} at {greeting['timestamp']}", fg="green"))


@cli.command()
@url_option
@click.option('--a', '-a', required=True, type=float, help='First number to add')
@click.option('--b', '-b', required=True, type=float, help='Second number to add')
@click.option('--local', '-l', is_flag=True, help='Use local wagmi library instead of API')
def add(url, a, b, local):
    """Add two numbers using either the wagmi service API or the local wagmi library."""
    if local:
        # Use the wagmi library directly
        try:
            result = wagmi_lib_add(a, b)
        except WagmiException as e:
            _fail(e)
        click.echo(click.style(f"Result (local): {result}", fg="green"))
        return

    client = WagmiServiceClient(url)
    try:
        # First check if the service is healthy
        if not client.check_health():
            _fail("WAGMI service is not healthy")

        result = client.add(a, b)
    except (ValueError, ConnectionError) as e:
        _fail(e)
    click.echo(click.style(f"Result (API): {result}", fg="green"))


@cli.command()
@url_option
@click.option('--burst', default=100, show_default=True, type=int,
              help='Concurrent requests to send after the functional cases')
def smoke(url, burst):
    """Run the functional smoke tests against a live service."""
    client = WagmiServiceClient(url)
    click.echo("🧪 Starting WAGMI-9000 Tests...\n")

    passed, failed = run_smoke_tests(client, echo=click.echo)
    click.echo(f"📊 Test Results: {passed} passed, {failed} failed")
    if failed:
        _fail("Some tests failed. Please check the implementation.")
    click.echo(click.style("🎉 All tests passed! WAGMI-9000 is ready for deployment.", fg="green"))

    if burst > 0:
        click.echo(f"🚀 Starting Load Test ({burst} concurrent requests)...")
        outcome = run_burst(client, count=burst)
        click.echo(f"Load Test Complete: {outcome['successful']}/{outcome['count']} successful "
                   f"in {outcome['duration_ms']:.0f}ms")
        click.echo(f"Average response time: {outcome['duration_ms'] / outcome['count']:.2f}ms per request")


@cli.command()
@url_option
@click.option('--rps', default=2000, show_default=True, type=int, help='Target requests per second')
@click.option('--duration', default=5, show_default=True, type=int, help='Test duration in seconds')
@click.option('--batch-size', default=100, show_default=True, type=int, help='Requests sent per batch')
@click.option('--workers', default=200, show_default=True, type=int, help='Concurrent sender threads')
@click.option('--json', 'as_json', is_flag=True, help='Output the summary as JSON')
def loadtest(url, rps, duration, batch_size, workers, as_json):
    """Generate weighted load against POST /wagmi and report latencies."""
    generator = LoadGenerator(url, rps=rps, duration=duration,
                              batch_size=batch_size, workers=workers)

    click.echo("🔍 Checking server availability...")
    if not generator.check_server():
        _fail(f"Server not reachable at {url}")
    click.echo(f"Server is running at {url}")

    def progress(stats):
        click.echo(f"\r⚡ Progress: {stats['total']}/{generator.total_requests} | "
                   f"Success: {stats['success']} | Errors: {stats['errors']}", nl=False)

    summary = generator.run(progress=None if as_json else progress)

    if as_json:
        click.echo(json.dumps(summary, indent=2))
    else:
        click.echo("")
        click.echo(format_report(summary))
    generator.close()


if __name__ == '__main__':
    cli()
