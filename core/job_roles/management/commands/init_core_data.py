"""
Initialize Core System Data

This management command populates the database with core system data:
- Pages (Dashboard, Users, Roles, Pages, Activity)
- Role (Admin, with every core page in its menu)

Usage:
    python manage.py init_core_data

This is idempotent - safe to run multiple times. An existing role menu is
left untouched.
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from core.job_roles.core_config import CORE_PAGES, CORE_ROLES
from core.job_roles.hierarchy import Assignment
from core.job_roles.models import Page, Role, RolePage
from core.job_roles.services import RolePageOrderService


class Command(BaseCommand):
    help = 'Initialize core system data (pages, roles and their menus)'

    def handle(self, *args, **options):
        self.stdout.write('Starting core data initialization...\n')

        try:
            with transaction.atomic():
                # 1. Create Pages
                self.stdout.write('Creating pages...')
                pages_created = 0
                page_ids = {}
                for page_data in CORE_PAGES:
                    page, created = Page.objects.get_or_create(
                        url=page_data['url'],
                        defaults={
                            'name': page_data['name'],
                            'icon': page_data['icon'],
                        }
                    )
                    page_ids[page.url] = page.pk
                    if created:
                        pages_created += 1
                        self.stdout.write(f"  Created page: {page.url}")
                    else:
                        self.stdout.write(f"  - Page already exists: {page.url}")

                self.stdout.write(self.style.SUCCESS(
                    f"\nPages: {pages_created} created, {len(CORE_PAGES) - pages_created} already existed\n"
                ))

                # 2. Create Roles and their menus
                self.stdout.write('Creating roles...')
                roles_created = 0
                for role_data in CORE_ROLES:
                    role, created = Role.objects.get_or_create(
                        name=role_data['name'],
                        defaults={'description': role_data['description']}
                    )
                    if created:
                        roles_created += 1
                        self.stdout.write(f"  Created role: {role.name}")
                    else:
                        self.stdout.write(f"  - Role already exists: {role.name}")

                    if RolePage.objects.filter(role=role).exists():
                        self.stdout.write(f"    - Menu already set for {role.name}")
                        continue

                    rows = [
                        Assignment(
                            role_id=role.pk,
                            page_id=page_ids[url],
                            parent_page_id=page_ids[parent_url] if parent_url else None,
                            display_order=position,
                        )
                        for position, (url, parent_url) in enumerate(role_data['menu'])
                    ]
                    RolePageOrderService(role).save_page_order(rows)
                    self.stdout.write(f"    Assigned {len(rows)} pages to {role.name}")

                self.stdout.write(self.style.SUCCESS(
                    f"\nRoles: {roles_created} created, {len(CORE_ROLES) - roles_created} already existed\n"
                ))

                self.stdout.write(self.style.SUCCESS('\n' + '=' * 60))
                self.stdout.write(self.style.SUCCESS('CORE DATA INITIALIZATION COMPLETE'))
                self.stdout.write(self.style.SUCCESS('=' * 60))

        except Exception as e:
            self.stdout.write(self.style.ERROR(f'\nError: {str(e)}\n'))
            raise
