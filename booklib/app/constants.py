"""Fixed user-facing notification texts and session cookie settings.

Every operation outcome maps to exactly one of these messages; none is
parameterized by error detail.
"""

LOGIN_SUCCESS = "Successfully logged in!"
LOGIN_FAILURE = "Failed to log in"
SIGNUP_SUCCESS = "Account created successfully!"
SIGNUP_FAILURE = "Failed to create an account"
LOGOUT_SUCCESS = "Successfully logged out"
LOGOUT_FAILURE = "Failed to log out"

ADD_SUCCESS = "Book added successfully!"
ADD_FAILURE = "Failed to add book"
UPDATE_SUCCESS = "Book updated successfully!"
UPDATE_FAILURE = "Failed to update book"
DELETE_SUCCESS = "Book deleted successfully!"
DELETE_FAILURE = "Failed to delete book"
LIST_FAILURE = "Failed to load books"

MISSING_FIELDS = "Title and author are required"
INVALID_YEAR = "Publication year must be a whole number"

EMPTY_LIBRARY = "No books in your library yet."

SESSION_COOKIE = "booklib_session"
