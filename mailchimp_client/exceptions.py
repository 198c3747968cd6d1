# mailchimp_client/exceptions.py

class MailchimpError(Exception):
    """Base exception for Mailchimp client errors."""
    def __init__(self, message="An error occurred with the Mailchimp API", status_code=None, original_exception=None):
        self.status_code = status_code
        self.original_exception = original_exception
        # Mailchimp answers errors with problem JSON; surface its detail when present
        details = ""
        if original_exception is not None:
            response = getattr(original_exception, 'response', None)
            if response is not None:
                try:
                    body = response.json()
                except ValueError:
                    body = None
                if isinstance(body, dict) and (body.get('detail') or body.get('title')):
                    details = f" - Detail: {body.get('detail') or body.get('title')}"
                else:
                    details = f" - Response: {response.text}"

        full_message = f"{message}{details}"
        super().__init__(full_message)

class MailchimpAuthenticationError(MailchimpError):
    """Raised for authentication issues (e.g., invalid API key or username)."""
    def __init__(self, message="Mailchimp authentication failed (401)", status_code=401, original_exception=None):
        super().__init__(message, status_code, original_exception)

class MailchimpRateLimitError(MailchimpError):
    """Raised when Mailchimp API rate limits are exceeded."""
    def __init__(self, message="Mailchimp API rate limit exceeded (429)", status_code=429, original_exception=None):
        super().__init__(message, status_code, original_exception)

class MailchimpNotFoundError(MailchimpError):
    """Raised when a requested resource (e.g., list) is not found."""
    def __init__(self, message="Mailchimp resource not found (404)", status_code=404, original_exception=None):
        super().__init__(message, status_code, original_exception)

class MailchimpBadRequestError(MailchimpError):
    """Raised for invalid requests (e.g., a merge field Mailchimp rejects)."""
    def __init__(self, message="Mailchimp bad request (400)", status_code=400, original_exception=None):
        super().__init__(message, status_code, original_exception)

class MailchimpServerError(MailchimpError):
    """Raised for server-side errors on Mailchimp's end."""
    def __init__(self, message="Mailchimp server error (5xx)", status_code=500, original_exception=None):
        if original_exception is not None and getattr(original_exception, 'response', None) is not None:
            status_code = original_exception.response.status_code
        super().__init__(message, status_code, original_exception)

class UpsertFailure(MailchimpError):
    """Raised when a single member PUT does not come back with HTTP 200."""
    def __init__(self, message="Mailchimp member upsert failed", status_code=None, original_exception=None):
        super().__init__(message, status_code, original_exception)
