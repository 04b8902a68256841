# -*- coding: utf-8 -*-
"""Location: ./deeppopulate/errors.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Exceptions raised while resolving schemas and building populate trees.

Every error here is a precondition violation: the request that triggered it
must fail instead of receiving a partially populated response.
"""

# Standard
from typing import Optional


class DeepPopulateError(Exception):
    """Base class for deep populate errors.

    Attributes:
        message (str): human readable reason.
    """

    def __init__(self, message: str):
        """Initialize the error.

        Args:
            message: human readable reason.
        """
        self.message = message
        super().__init__(self.message)


class SchemaNotFoundError(DeepPopulateError):
    """Raised when a content-type identifier has no registered schema.

    Attributes:
        uid (str): the identifier that could not be resolved.

    Examples:
        >>> err = SchemaNotFoundError("api::article.article")
        >>> (err.uid, str(err))
        ('api::article.article', "No schema registered for content type 'api::article.article'")
    """

    def __init__(self, uid: str):
        """Initialize the error.

        Args:
            uid: the identifier that could not be resolved.
        """
        self.uid = uid
        super().__init__(f"No schema registered for content type '{uid}'")


class InvalidSchemaError(DeepPopulateError):
    """Raised when schema metadata is malformed.

    Attributes:
        uid (str): the content type being parsed.
        attribute (Optional[str]): the offending attribute, if any.
        reason (str): what was wrong.

    Examples:
        >>> err = InvalidSchemaError("shared.seo", "missing 'component'", attribute="meta")
        >>> str(err)
        "Invalid schema for 'shared.seo' (attribute 'meta'): missing 'component'"
        >>> str(InvalidSchemaError("shared.seo", "not a JSON object"))
        "Invalid schema for 'shared.seo': not a JSON object"
    """

    def __init__(self, uid: str, reason: str, attribute: Optional[str] = None):
        """Initialize the error.

        Args:
            uid: the content type being parsed.
            reason: what was wrong.
            attribute: the offending attribute name.
        """
        self.uid = uid
        self.attribute = attribute
        self.reason = reason
        location = f"'{uid}' (attribute '{attribute}')" if attribute else f"'{uid}'"
        super().__init__(f"Invalid schema for {location}: {reason}")
