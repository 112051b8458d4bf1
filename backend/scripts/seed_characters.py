"""Seed the character catalog with a starter roster."""

from __future__ import annotations

import asyncio

from sqlalchemy import select

from app.db.session import get_sessionmaker
from app.models import Character
from app.schemas.character import CharacterCreate
from app.services import character_service

STARTER_CHARACTERS: list[dict[str, str]] = [
    {
        "name": "Naruto Uzumaki",
        "anime": "Naruto",
        "gender": "Male",
        "age": "17",
        "hair_color": "Blonde",
        "eye_color": "Blue",
        "occupation": "Ninja of the Hidden Leaf Village",
        "personality": "Loud, stubborn, endlessly optimistic and loyal to his friends",
        "powers_abilities": "Shadow Clone Jutsu, Rasengan, Sage Mode, Nine-Tails chakra",
        "backstory": "An orphan who carries the Nine-Tailed Fox and dreams of becoming Hokage",
        "notable_quotes": "I'm not gonna run away, I never go back on my word!",
        "relationships": "Sasuke Uchiha (rival), Sakura Haruno (teammate), Kakashi (mentor)",
        "appearance_description": "Spiky hair, whisker marks on his cheeks, orange jumpsuit",
        "character_type": "protagonist",
    },
    {
        "name": "Monkey D. Luffy",
        "anime": "One Piece",
        "gender": "Male",
        "age": "19",
        "hair_color": "Black",
        "eye_color": "Black",
        "occupation": "Captain of the Straw Hat Pirates",
        "personality": "Carefree, reckless, fiercely protective of his crew",
        "powers_abilities": "Rubber body from the Gum-Gum Fruit, Haki, Gear techniques",
        "backstory": "Set out to sea to find the One Piece and become King of the Pirates",
        "notable_quotes": "I'm gonna be King of the Pirates!",
        "relationships": "Zoro (first mate), Shanks (inspiration), Ace (brother)",
        "appearance_description": "Straw hat, red vest, scar under his left eye",
        "character_type": "protagonist",
    },
    {
        "name": "Light Yagami",
        "anime": "Death Note",
        "gender": "Male",
        "age": "17",
        "hair_color": "Brown",
        "eye_color": "Brown",
        "occupation": "Student",
        "personality": "Brilliant, calculating, convinced of his own righteousness",
        "powers_abilities": "Owns a notebook that kills anyone whose name is written in it",
        "backstory": "A top student who finds a shinigami's notebook and becomes Kira",
        "notable_quotes": "I am justice!",
        "relationships": "L (rival), Ryuk (shinigami), Misa Amane",
        "appearance_description": "Neat hair, school uniform or business suit",
        "character_type": "antagonist",
    },
    {
        "name": "Mikasa Ackerman",
        "anime": "Attack on Titan",
        "gender": "Female",
        "age": "19",
        "hair_color": "Black",
        "eye_color": "Grey",
        "occupation": "Soldier of the Survey Corps",
        "personality": "Calm, reserved, devoted to protecting Eren",
        "powers_abilities": "Exceptional combat skill with omni-directional mobility gear",
        "backstory": "Taken in by the Yeager family after her parents were murdered",
        "notable_quotes": "This world is cruel, but also very beautiful.",
        "relationships": "Eren Yeager (adoptive brother), Armin Arlert (friend), Levi (relative)",
        "appearance_description": "Short hair and a red scarf she never takes off",
        "character_type": "supporting",
    },
    {
        "name": "Edward Elric",
        "anime": "Fullmetal Alchemist: Brotherhood",
        "gender": "Male",
        "age": "15",
        "hair_color": "Blonde",
        "eye_color": "Gold",
        "occupation": "State Alchemist",
        "personality": "Hot-headed, determined, sensitive about his height",
        "powers_abilities": "Alchemy without a transmutation circle, automail arm",
        "backstory": "Lost his leg and arm in a failed attempt to bring his mother back",
        "notable_quotes": "A lesson without pain is meaningless.",
        "relationships": "Alphonse Elric (brother), Winry Rockbell (childhood friend)",
        "appearance_description": "Braided hair, red coat, metal right arm",
        "character_type": "protagonist",
    },
    {
        "name": "Satoru Gojo",
        "anime": "Jujutsu Kaisen",
        "gender": "Male",
        "age": "28",
        "hair_color": "White",
        "eye_color": "Blue",
        "occupation": "Teacher at Tokyo Jujutsu High",
        "personality": "Playful, arrogant, deeply caring toward his students",
        "powers_abilities": "Limitless, Six Eyes, Domain Expansion: Infinite Void",
        "backstory": "Heir of the Gojo clan and the strongest living jujutsu sorcerer",
        "notable_quotes": "Throughout heaven and earth, I alone am the honored one.",
        "relationships": "Yuji Itadori (student), Suguru Geto (former best friend)",
        "appearance_description": "Tall, blindfold over his eyes, dark uniform",
        "character_type": "supporting",
    },
]


async def seed_characters() -> None:
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        existing = {
            (name, anime)
            for name, anime in (
                await session.execute(select(Character.name, Character.anime))
            ).all()
        }
        created = 0
        for data in STARTER_CHARACTERS:
            if (data["name"], data["anime"]) in existing:
                continue
            await character_service.create_character(session, CharacterCreate(**data))
            created += 1

    print(f"Seeded {created} characters ({len(existing)} already present).")


def main() -> None:
    asyncio.run(seed_characters())


if __name__ == "__main__":
    main()
