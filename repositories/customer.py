from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.customer import Customer, CustomerDTO


class CustomerRepository:
    @staticmethod
    async def get_by_email(email: str, session: AsyncSession) -> CustomerDTO | None:
        stmt = select(Customer).where(Customer.email == email)
        customer = await session.execute(stmt)
        customer = customer.scalar()
        if customer is not None:
            return CustomerDTO.model_validate(customer, from_attributes=True)
        else:
            return None

    @staticmethod
    async def create(customer_dto: CustomerDTO, session: AsyncSession) -> CustomerDTO:
        customer = Customer(**customer_dto.model_dump(exclude_none=True))
        session.add(customer)
        # Flush so a concurrent insert of the same email fails here, inside the transaction
        await session.flush()
        await session.refresh(customer)
        return CustomerDTO.model_validate(customer, from_attributes=True)
