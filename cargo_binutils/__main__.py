# Copyright 2024 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import argparse
import sys

from .cli import run
from .tool import Tool


def main(args=None):
    if args is None:
        parser = argparse.ArgumentParser(
            prog='python -m cargo_binutils',
            description='Run an llvm tool from the Rust toolchain against '
                        'the artifact of a cargo build.')
        parser.add_argument('tool', choices=[t.value for t in Tool])
        parser.add_argument('args', nargs=argparse.REMAINDER,
                            help='arguments for `cargo <tool>`')
        args = parser.parse_args()

    return run(Tool(args.tool), args.args)


if __name__ == '__main__':
    sys.exit(main())
