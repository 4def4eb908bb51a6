from .errors import ValidationError
from .models import DEFAULT_CATEGORY, Book, Member, timestamp


def _text(value):
    return None if value is None else str(value).strip()


def positive_int(value, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Campo inválido: {field}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Campo inválido: {field}") from None
    if number <= 0 or (isinstance(value, float) and number != value):
        raise ValidationError(f"Campo inválido: {field}")
    return number


def create_book(store, title, author, count, category=None) -> Book:
    title, author, category = _text(title), _text(author), _text(category)
    if not title or not author or not count:
        raise ValidationError("Campos obrigatórios: title, author, count")
    count = positive_int(count, "count")
    book = Book(
        id=None,
        title=title,
        author=author,
        category=category or DEFAULT_CATEGORY,
        count=count,
        available=count,
        created_at=timestamp(),
    )
    with store.atomic() as tx:
        return tx.add(book)


def list_books(store) -> list:
    with store.atomic() as tx:
        books = tx.list(Book)
    return sorted(books, key=lambda b: b.title.lower())


def create_member(store, name, contact, email=None) -> Member:
    name, contact, email = _text(name), _text(contact), _text(email)
    if not name or not contact:
        raise ValidationError("Campos obrigatórios: name, contact")
    member = Member(
        id=None,
        name=name,
        contact=contact,
        email=email or "",
        active_loans=0,
        register_date=timestamp(),
    )
    with store.atomic() as tx:
        return tx.add(member)


def list_members(store) -> list:
    with store.atomic() as tx:
        members = tx.list(Member)
    return sorted(members, key=lambda m: m.name.lower())
