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


class BinutilsError(Exception):
    '''Base class for every error that ends an invocation before the
    wrapped tool gets to run.
    '''


class ToolchainUnavailable(BinutilsError):
    pass


class InvalidTarget(BinutilsError):

    def __init__(self, target, detail=None):
        message = 'invalid target triple `%s`' % target
        if detail:
            message = '%s: %s' % (message, detail)
        super(InvalidTarget, self).__init__(message)
        self.target = target


class ComponentMissing(BinutilsError):
    pass


class InvalidRequest(BinutilsError):
    pass


class ConfigError(BinutilsError):
    pass


class ProjectNotFound(BinutilsError):
    pass


class BuildFailed(BinutilsError):
    '''`cargo build` exited unsuccessfully. Its exit code is handed back
    to the caller untouched.
    '''

    def __init__(self, exit_code):
        super(BuildFailed, self).__init__(
                '`cargo build` exited with status %d' % exit_code)
        self.exit_code = exit_code


class ArtifactNotFound(BinutilsError):
    pass


class AmbiguousArtifact(BinutilsError):

    def __init__(self, candidates):
        super(AmbiguousArtifact, self).__init__(
                'found several equally recent artifacts, refusing to pick '
                'one: %s' % ', '.join(candidates))
        self.candidates = list(candidates)


class ProcessSpawnFailure(BinutilsError):
    pass
