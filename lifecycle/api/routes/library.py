"""Library API routes: books, members and loans."""

from fastapi import APIRouter, status

from lifecycle.api.deps import ContainerDep
from lifecycle.application.commands import (
    GetMemberLoansQuery,
    GetMemberQuery,
    ListOverdueLoansQuery,
    LoanBookCommand,
    RegisterBookCommand,
    RegisterMemberCommand,
    ReturnBookCommand,
)
from lifecycle.application.dtos import (
    BookResponse,
    LoanResponse,
    MemberResponse,
    ReturnResponse,
)

router = APIRouter(tags=["library"])


@router.post(
    "/books",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid ISBN or book data"},
        409: {"description": "ISBN already registered"},
    },
)
async def register_book(
    command: RegisterBookCommand, container: ContainerDep
) -> BookResponse:
    return await container.register_book.execute(command)


@router.post(
    "/members",
    response_model=MemberResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Email already registered"}},
)
async def register_member(
    command: RegisterMemberCommand, container: ContainerDep
) -> MemberResponse:
    return await container.register_member.execute(command)


@router.get("/members/{member_id}", response_model=MemberResponse)
async def get_member(member_id: str, container: ContainerDep) -> MemberResponse:
    return await container.get_member.execute(GetMemberQuery(member_id=member_id))


@router.get("/members/{member_id}/loans", response_model=list[LoanResponse])
async def get_member_loans(
    member_id: str, container: ContainerDep, active_only: bool = False
) -> list[LoanResponse]:
    return await container.get_member_loans.execute(
        GetMemberLoansQuery(member_id=member_id, active_only=active_only)
    )


@router.post(
    "/loans",
    response_model=LoanResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Book or member not found"},
        409: {"description": "Book unavailable, loan limit reached or member penalized"},
    },
)
async def loan_book(command: LoanBookCommand, container: ContainerDep) -> LoanResponse:
    return await container.loan_book.execute(command)


@router.post(
    "/loans/{loan_id}/return",
    response_model=ReturnResponse,
    responses={409: {"description": "Loan already returned"}},
)
async def return_book(loan_id: str, container: ContainerDep) -> ReturnResponse:
    return await container.return_book.execute(ReturnBookCommand(loan_id=loan_id))


@router.get("/loans/overdue", response_model=list[LoanResponse])
async def list_overdue_loans(container: ContainerDep) -> list[LoanResponse]:
    return await container.list_overdue_loans.execute(ListOverdueLoansQuery())
