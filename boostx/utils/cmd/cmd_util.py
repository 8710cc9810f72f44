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

import shlex
import subprocess


def decode_bytes(input: bytes) -> str:
    if input is None:
        return ""
    try:
        return bytes.decode(input, "UTF-8")
    except UnicodeDecodeError:
        return bytes.decode(input, "latin-1")


def format_command(command) -> str:
    if isinstance(command, str):
        return command
    return " ".join(shlex.quote(str(x)) for x in command)


def exec_command(command, cwd=None, capture_output=True):
    """
    Run an external tool and wait for it to finish.

    Args:
        command: argv list (or a shell string)
        cwd: working directory for the child process
        capture_output: when False the tool writes straight to the terminal

    Returns:
        tuple: (exit_code, output) where output is the combined
        stdout/stderr, or "" when the output was not captured
    """
    stdout = subprocess.PIPE if capture_output else None
    stderr = subprocess.STDOUT if capture_output else None
    try:
        compile_popen = subprocess.Popen(
            command,
            shell=isinstance(command, str),
            cwd=cwd,
            stdout=stdout,
            stderr=stderr,
        )
    except OSError as e:
        # same status a shell reports for a missing program
        name = command if isinstance(command, str) else command[0]
        return 127, f"{name}: {e.strerror}"
    out, _ = compile_popen.communicate()
    return compile_popen.returncode, decode_bytes(out)
