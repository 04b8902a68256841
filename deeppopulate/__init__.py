# -*- coding: utf-8 -*-
"""Location: ./deeppopulate/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Deep Populate - request-time populate expansion for content APIs.

Expands read requests into a recursive populate directive so that relations,
media, components and dynamic zones come back without being asked for.
"""

__copyright__ = "Copyright 2025"
__license__ = "Apache 2.0"
__version__ = "1.0.0"
__description__ = "Automatic deep populate middleware for content APIs"
__packages__ = ["deeppopulate"]
