#
# JS Harvest: fetch JavaScript files, pull relative API endpoints out of their
#             string literals and scan them for hardcoded secrets.
#
# Dependencies: requests, colorama
#
# Re-running appends to the secrets output; the endpoints output is recreated
# at every start.
#
import argparse
import json
import logging
import os
import re
import sys
from dataclasses import dataclass
from urllib.parse import urlparse

import requests
from colorama import Fore, Style, init

logger = logging.getLogger(__name__)

# --- Configuration ---

# Some servers block the default python-requests identifier.
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.36"
)

# A double-quoted literal that looks like a relative path. Group 1 is the
# path without its quotes.
ENDPOINT_PATTERN = re.compile(r'"(/[a-zA-Z0-9_?&=/\-#]*)"')

DEFAULT_PATTERN_FILE = os.path.join(os.path.expanduser("~"), ".config", "secret.json")
DEFAULT_ENDPOINT_OUTPUT = "js_endpoint"
DEFAULT_SECRET_OUTPUT = "js_secret"

SEPARATOR = " ::: "


class PatternConfigError(Exception):
    """The pattern configuration file is unreadable or invalid."""


class PatternFileMissing(PatternConfigError):
    """The pattern configuration file does not exist."""


@dataclass(frozen=True)
class PatternGroup:
    """A named class of secret and the compiled regexes that detect it."""

    name: str
    patterns: tuple


# --- Helper Functions ---

def is_javascript_url(url):
    """
    Only URLs ending in .js are fetched.
    """
    return url.endswith(".js")


def extract_base_url(url):
    """
    Returns scheme://host for the given URL.

    Raises ValueError when urllib cannot parse the URL. No other validation
    is done, so a URL without a scheme yields a best-effort "://" base.
    """
    parsed = urlparse(url)
    host = parsed.netloc.rpartition("@")[2]
    return parsed.scheme + "://" + host


def create_session():
    """
    Creates the HTTP session shared by every fetch in a run.
    """
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    return session


def fetch(url, session):
    """
    Fetches the body of a single JavaScript file.

    Transport failures propagate as requests.RequestException, and hosts
    urllib3 cannot parse as ValueError. A response
    other than 200 OK yields None and is not treated as an error.
    """
    response = session.get(url)
    if response.status_code != 200:
        logger.debug("Ignoring %s: HTTP %s", url, response.status_code)
        return None
    return response.text


def extract_endpoints(line, base_url, seen, sink):
    """
    Resolves every quoted path literal in `line` against `base_url`.

    Endpoints not yet in `seen` are written to `sink`, one per line, and
    added to `seen`. Returns the newly written endpoints in discovery order.
    """
    discovered = []
    for match in ENDPOINT_PATTERN.finditer(line):
        endpoint = base_url + match.group(1)
        if endpoint in seen:
            continue
        sink.write(endpoint + "\n")
        seen.add(endpoint)
        discovered.append(endpoint)
    return discovered


def load_patterns(path):
    """
    Loads the pattern groups from a JSON file of the form
    [{"name": "...", "patterns": ["regex", ...]}, ...].

    Every pattern is compiled here, once per run.
    """
    if not os.path.exists(path):
        raise PatternFileMissing(f"Missing pattern file: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            entries = json.load(f)
    except (OSError, ValueError) as e:
        raise PatternConfigError(f"Could not read pattern file {path}: {e}") from e

    if not isinstance(entries, list):
        raise PatternConfigError(f"Pattern file {path} must contain a JSON array")

    groups = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise PatternConfigError(f"Entry {index} in {path} is not an object")
        name = entry.get("name")
        sources = entry.get("patterns")
        if not isinstance(name, str):
            raise PatternConfigError(f"Entry {index} in {path} has no string 'name'")
        if not isinstance(sources, list) or not all(isinstance(s, str) for s in sources):
            raise PatternConfigError(f"Entry '{name}' in {path} needs a list of string 'patterns'")

        compiled = []
        for source in sources:
            try:
                compiled.append(re.compile(source))
            except re.error as e:
                raise PatternConfigError(f"Invalid regex in '{name}': {source!r} ({e})") from e
        groups.append(PatternGroup(name, tuple(compiled)))

    logger.debug("Loaded %d pattern groups from %s", len(groups), path)
    return groups


def find_matches(body, pattern_groups):
    """
    Runs every pattern of every group against the whole body.

    Returns a dict of group name -> matched strings. Only groups with at
    least one match get an entry; duplicates are kept.
    """
    matches = {}
    for group in pattern_groups:
        for pattern in group.patterns:
            found = [match.group(0) for match in pattern.finditer(body)]
            if found:
                matches.setdefault(group.name, []).extend(found)
    return matches


def format_match(name, match, color=False):
    """
    Renders one "name ::: match" line, name in red and match in green when colored.
    """
    if color:
        return f"{Fore.RED}{name}{Style.RESET_ALL}{SEPARATOR}{Fore.GREEN}{match}{Style.RESET_ALL}"
    return f"{name}{SEPARATOR}{match}"


def display_matches(matches, color=False):
    """
    Prints every match under a header for its pattern group.
    """
    for name, found in matches.items():
        print(f"Matches for pattern ({name}):")
        for match in found:
            print(format_match(name, match, color))


def save_results(matches, url, path):
    """
    Appends one block to the secrets output: the URL, then a
    "name ::: match" line per match. The URL is written even when nothing
    matched.
    """
    with open(path, "a", encoding="utf-8") as f:
        f.write(url + "\n")
        for name, found in matches.items():
            for match in found:
                f.write(f"{name}{SEPARATOR}{match}\n")


def iter_urls(stream):
    """
    Yields the stripped, non-empty lines of a URL list.
    """
    for line in stream:
        url = line.strip()
        if url:
            yield url


# --- Pipeline ---

class HarvestSession:
    """
    Owns the state shared across every input of a run: the HTTP session,
    the set of endpoints already written and the open endpoints output.

    pattern_groups=None disables secret scanning.
    """

    def __init__(self, endpoint_output=DEFAULT_ENDPOINT_OUTPUT, secret_output=DEFAULT_SECRET_OUTPUT,
                 pattern_groups=None, color=False, verbose=False, http=None):
        self.secret_output = secret_output
        self.pattern_groups = pattern_groups
        self.color = color
        self.verbose = verbose
        self.http = http if http is not None else create_session()
        self.seen = set()
        self.endpoint_sink = open(endpoint_output, "w", encoding="utf-8")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        if not self.endpoint_sink.closed:
            self.endpoint_sink.close()

    def process(self, url):
        """
        Fetches one input URL, scans it for secrets and records its new
        endpoints. Returns the endpoints discovered for this input.

        Bad inputs and transport errors are reported and skipped. Errors
        writing the outputs propagate.
        """
        if not is_javascript_url(url):
            logger.debug("Skipping non-JavaScript input: %s", url)
            return []

        try:
            base_url = extract_base_url(url)
        except ValueError as e:
            print(f"[!] Skipping malformed URL {url}: {e}")
            return []

        try:
            body = fetch(url, self.http)
        except (requests.exceptions.RequestException, ValueError) as e:
            # urllib3 raises LocationParseError (a ValueError) for some bad hosts.
            print(f"[!] Error making the HTTP request for {url}: {e}")
            return []
        if body is None:
            return []

        if self.color:
            print(f"[{Fore.GREEN}Done{Style.RESET_ALL}] {url}")
        else:
            print(f"[Done] {url}")

        if self.pattern_groups is not None:
            matches = find_matches(body, self.pattern_groups)
            if self.verbose:
                display_matches(matches, self.color)
            save_results(matches, url, self.secret_output)

        discovered = []
        for line in body.split("\n"):
            discovered.extend(extract_endpoints(line, base_url, self.seen, self.endpoint_sink))
        self.endpoint_sink.flush()

        if self.verbose:
            for endpoint in discovered:
                if self.color:
                    print(f"{Fore.GREEN}{endpoint}{Style.RESET_ALL}")
                else:
                    print(f" {endpoint}")
        return discovered

    def run(self, urls):
        for url in urls:
            self.process(url)


# --- Main Execution ---

def parse_args(argv=None):
    """
    Parses the command line flags.
    """
    parser = argparse.ArgumentParser(
        description="Extract endpoints and hardcoded secrets from JavaScript files. "
                    "Reads URLs from stdin when neither -u nor -f is given.",
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument('-u', '--url', help='A single URL to make the request.')
    parser.add_argument('-f', '--file', help='A file containing a list of URLs (one per line).')
    parser.add_argument('-c', '--color', action='store_true', help='Enable colored output.')
    parser.add_argument('-v', '--verbose', action='store_true', help='Display every endpoint and match.')

    parser.add_argument('-p', '--patterns', default=DEFAULT_PATTERN_FILE,
                        help=f'JSON pattern file (default: {DEFAULT_PATTERN_FILE}).')
    parser.add_argument('--endpoints-output', default=DEFAULT_ENDPOINT_OUTPUT,
                        help='Endpoints output, recreated on every run (default: %(default)s).')
    parser.add_argument('--secrets-output', default=DEFAULT_SECRET_OUTPUT,
                        help='Secrets output, appended to across runs (default: %(default)s).')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging.')

    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )
    if args.color:
        init()

    try:
        pattern_groups = load_patterns(args.patterns)
    except PatternFileMissing as e:
        print(f"[!] {e}. Secret scanning is disabled for this run.")
        pattern_groups = None
    except PatternConfigError as e:
        print(f"[!] Fatal Error: {e}")
        return 1

    try:
        session = HarvestSession(
            endpoint_output=args.endpoints_output,
            secret_output=args.secrets_output,
            pattern_groups=pattern_groups,
            color=args.color,
            verbose=args.verbose,
        )
    except OSError as e:
        print(f"[!] Fatal Error: could not create the output file {args.endpoints_output}: {e}")
        return 1

    with session:
        try:
            if args.url:
                session.process(args.url)

            if args.file:
                try:
                    handle = open(args.file, "r", encoding="utf-8", errors="replace")
                except OSError as e:
                    print(f"[!] Error opening the file {args.file}: {e}")
                else:
                    with handle:
                        session.run(iter_urls(handle))

            if not args.url and not args.file:
                stdin = sys.stdin
                if hasattr(stdin, "reconfigure"):
                    stdin.reconfigure(errors="replace")
                session.run(iter_urls(stdin))
        except OSError as e:
            print(f"[!] Fatal Error: could not write results: {e}")
            return 1
        except KeyboardInterrupt:
            print("\n[!] Interrupted by user. Exiting...")
            return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
