#!/usr/bin/env python3
"""
Database Seed Script
Populate a demo catalog into the database

Features:
1. Create tables (no migrations, create_all)
2. Create concerts and ticket types from seed_catalog.json
3. Print JWTs for the demo buyer and admin (accounts live in the identity service)
"""

import asyncio
from datetime import datetime
import json

from sqlalchemy import func, select

from src.platform.constant.path import SEED_DATA_FILE
from src.platform.database.orm_db_setting import (
    Database,
    create_db_and_tables,
    engine_manager,
)
from src.service.concert_ticketing.domain.entity.user_entity import UserEntity, UserRole
from src.service.concert_ticketing.driven_adapter.model.concert_model import (
    ConcertModel,
    TicketTypeModel,
)
from src.service.concert_ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


def _load_catalog() -> dict:
    with open(SEED_DATA_FILE, 'r') as f:
        return json.load(f)


async def create_catalog(session, catalog: dict) -> None:
    print(f'🎤 Creating {len(catalog["concerts"])} concerts...')

    for concert_config in catalog['concerts']:
        starts_at = concert_config.get('starts_at')
        concert = ConcertModel(
            title=concert_config['title'],
            venue=concert_config.get('venue', ''),
            starts_at=datetime.fromisoformat(starts_at) if starts_at else None,
        )
        session.add(concert)
        await session.flush()

        for ticket_type_config in concert_config['ticket_types']:
            session.add(
                TicketTypeModel(
                    concert_id=concert.id,
                    name=ticket_type_config['name'],
                    price=ticket_type_config['price'],
                    quota_total=ticket_type_config['quota_total'],
                    quota_sold=0,
                )
            )
        await session.flush()
        print(
            f'   ✅ Concert ID={concert.id} "{concert.title}" '
            f'with {len(concert_config["ticket_types"])} ticket types'
        )


async def verify_data(session) -> None:
    print('🔍 Verifying seeded data...')
    result = await session.execute(select(TicketTypeModel).order_by(TicketTypeModel.id))
    for ticket_type in result.scalars().all():
        print(
            f'      TicketType ID={ticket_type.id}, Concert={ticket_type.concert_id}, '
            f'Name={ticket_type.name}, Price={ticket_type.price}, Quota={ticket_type.quota_total}'
        )


def print_tokens(catalog: dict) -> None:
    jwt_auth = JwtAuth()
    print('📋 Demo tokens (Authorization: Bearer <token>):')
    for user_config in catalog['users']:
        user = UserEntity(
            id=user_config['id'],
            email=user_config['email'],
            name=user_config['name'],
            role=UserRole(user_config['role']),
        )
        print(f'   {user.role.value}: {user.email}')
        print(f'   {jwt_auth.create_jwt_token(user)}')


async def main() -> None:
    print('🌱 Starting data seeding...')
    print('=' * 50)

    catalog = _load_catalog()
    await create_db_and_tables()

    try:
        async with Database().session() as session:
            existing = await session.scalar(select(func.count()).select_from(ConcertModel))
            if existing:
                print(f'⏭️  {existing} concerts already present, skipping catalog')
            else:
                await create_catalog(session, catalog)
                await session.commit()
                print('✅ All data committed successfully!')
            await verify_data(session)
    finally:
        await engine_manager.dispose()

    print()
    print('=' * 50)
    print_tokens(catalog)


if __name__ == '__main__':
    asyncio.run(main())
