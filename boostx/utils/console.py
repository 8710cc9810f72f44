#
# Copyright 2024 boostx Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

"""Console output helpers shared by the commands and build scripts."""

import sys


class Colors:
    """ANSI color codes for terminal output."""
    HEADER = '\033[95m'
    OKBLUE = '\033[94m'
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'


def print_banner(title):
    print(f"=================={title}========================")


def print_step(message):
    """Print a step message."""
    print(f"\n{Colors.OKBLUE}{'=' * 70}{Colors.ENDC}")
    print(f"{Colors.OKBLUE}{Colors.BOLD}>>> {message}{Colors.ENDC}")
    print(f"{Colors.OKBLUE}{'=' * 70}{Colors.ENDC}\n")


def print_info(message):
    print(f"[INFO] {message}")


def print_success(message):
    """Print a success message."""
    print(f"{Colors.OKGREEN}✓ {message}{Colors.ENDC}")


def print_warning(message):
    """Print a warning message."""
    print(f"{Colors.WARNING}⚠️  {message}{Colors.ENDC}")


def print_error(message):
    """Print an error message to stderr."""
    print(f"{Colors.FAIL}ERROR: {message}{Colors.ENDC}", file=sys.stderr)
