"""Server-rendered HTML for the login, signup and library pages."""

from html import escape
from typing import Iterable, Optional

from booklib.models import BookDraft, BookRecord
from .constants import EMPTY_LIBRARY
from .view_model import LibraryViewModel, Notification

STYLE = """
body { font-family: system-ui, sans-serif; background: #f4f4f7; margin: 0; }
.container { max-width: 720px; margin: 2rem auto; padding: 0 1rem; }
.card { background: #fff; border-radius: 8px; padding: 1.5rem; margin-bottom: 1.5rem;
        box-shadow: 0 1px 3px rgba(0, 0, 0, 0.1); }
.header { display: flex; justify-content: space-between; align-items: center; }
form.book-form input { display: block; width: 100%; margin-bottom: 0.75rem; padding: 0.5rem; }
.book-card { display: flex; justify-content: space-between; align-items: center;
             border-bottom: 1px solid #eee; padding: 0.75rem 0; }
.btn-group { display: flex; gap: 0.5rem; }
.toast { padding: 0.75rem 1rem; border-radius: 6px; margin-bottom: 0.5rem; }
.toast.success { background: #e6f4ea; color: #1e4620; }
.toast.error { background: #fdecea; color: #611a15; }
.no-books { color: #666; }
"""


def _layout(title: str, body: str, notifications: Iterable[Notification]) -> str:
    toasts = "".join(
        f'<div class="toast {n.kind}" role="status">{escape(n.message)}</div>'
        for n in notifications
    )
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        f"<title>{escape(title)}</title><style>{STYLE}</style></head>"
        f'<body><div class="container"><div class="toasts">{toasts}</div>'
        f"{body}</div></body></html>"
    )


def _credentials_form(action: str, button: str, email: str) -> str:
    return (
        f'<form method="post" action="{action}">'
        '<input id="email" name="email" type="email" required '
        f'placeholder="Email address" value="{escape(email)}">'
        '<input id="password" name="password" type="password" required '
        'placeholder="Password">'
        f'<button type="submit">{escape(button)}</button>'
        "</form>"
    )


def render_login_page(
    notifications: Iterable[Notification] = (), email: str = ""
) -> str:
    body = (
        '<div class="card login-card"><h2>Login</h2>'
        f"{_credentials_form('/login', 'Sign in', email)}"
        '<p>Don\'t have an account? <a href="/signup">Sign up</a></p></div>'
    )
    return _layout("Login", body, notifications)


def render_signup_page(
    notifications: Iterable[Notification] = (), email: str = ""
) -> str:
    body = (
        '<div class="card signup-card"><h2>Sign Up</h2>'
        f"{_credentials_form('/signup', 'Create Account', email)}"
        '<p>Already have an account? <a href="/login">Sign in</a></p></div>'
    )
    return _layout("Sign Up", body, notifications)


def _book_fields(book: BookDraft) -> str:
    year = "" if book.year is None else str(book.year)
    return (
        '<input type="text" name="title" required placeholder="Book Title" '
        f'value="{escape(book.title)}">'
        '<input type="text" name="author" required placeholder="Author" '
        f'value="{escape(book.author)}">'
        '<input type="number" name="year" placeholder="Publication Year" '
        f'value="{escape(year)}">'
    )


def _edit_form(editing: Optional[BookRecord]) -> str:
    if editing is None:
        return ""
    return (
        '<div class="card form-container"><h2>Edit Book</h2>'
        f'<form method="post" action="/books/{escape(editing.id)}" class="book-form">'
        f"{_book_fields(editing)}"
        '<div class="btn-group"><button type="submit" class="save-btn">Save Changes</button>'
        '<button type="submit" class="cancel-btn" formaction="/books/edit/cancel" '
        "formnovalidate>Cancel</button></div></form></div>"
    )


def _book_card(book: BookRecord) -> str:
    book_id = escape(book.id)
    published = "" if book.year is None else f"<p>Published: {book.year}</p>"
    return (
        f'<div class="book-card" id="book-{book_id}"><div class="book-info">'
        f"<h3>{escape(book.title)}</h3><p>by {escape(book.author)}</p>{published}</div>"
        '<div class="btn-group">'
        f'<form method="post" action="/books/{book_id}/edit">'
        '<button type="submit" class="edit-btn">Edit</button></form>'
        f'<form method="post" action="/books/{book_id}/delete">'
        '<button type="submit" class="delete-btn">Delete</button></form>'
        "</div></div>"
    )


def render_library_page(view_model: LibraryViewModel) -> str:
    """Render the library page from the view-model, consuming its notifications."""
    if view_model.books:
        books = "".join(_book_card(book) for book in view_model.books)
    else:
        books = f'<p class="no-books">{escape(EMPTY_LIBRARY)}</p>'

    body = (
        '<div class="header"><h1>My Book Library</h1>'
        '<form method="post" action="/logout">'
        '<button type="submit" class="logout-btn">Logout</button></form></div>'
        '<div class="card form-container"><h2>Add New Book</h2>'
        '<form method="post" action="/books" class="book-form">'
        f"{_book_fields(view_model.draft)}"
        '<button type="submit" class="add-btn">Add Book</button></form></div>'
        f"{_edit_form(view_model.editing)}"
        f'<div class="card book-list-container"><h2>My Books</h2>{books}</div>'
    )
    return _layout("My Book Library", body, view_model.drain_notifications())
