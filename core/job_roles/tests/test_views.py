from rest_framework.test import APITestCase
from rest_framework import status
from core.job_roles.core_config import CoreRoles
from core.job_roles.models import Page, Role, RolePage, UserRole
from core.user_accounts.models import CustomUser
from core.base.test_utils import setup_core_data, setup_admin_role


def rows_of(response):
    return [
        (item['page_id'], item['parent_page_id'], item['display_order'])
        for item in response.data['pages_with_order']
    ]


class RoleAPITests(APITestCase):
    """Test Role API endpoints"""

    @classmethod
    def setUpTestData(cls):
        setup_core_data()

    def setUp(self):
        """Set up test data"""
        self.admin = CustomUser.objects.create_user(
            email='admin_r@example.com',
            name='Admin User',
            password='admin123',
            user_type_name='admin'
        )
        self.client.force_authenticate(user=self.admin)

        self.role = Role.objects.create(name='Support', description='Support desk')
        self.home = Page.objects.create(name='Home', url='/home')
        self.tickets = Page.objects.create(name='Tickets', url='/tickets')

    def test_role_list_get(self):
        """GET /core/job_roles/roles/ - List all roles"""
        response = self.client.get('/core/job_roles/roles/?page_size=100')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        names = [role['name'] for role in response.data['data']['results']]
        self.assertIn('Support', names)
        self.assertIn(CoreRoles.ADMIN, names)

    def test_role_list_search(self):
        response = self.client.get('/core/job_roles/roles/?search=desk')
        names = [role['name'] for role in response.data['data']['results']]
        self.assertEqual(names, ['Support'])

    def test_role_create_post(self):
        """POST /core/job_roles/roles/ - Create new role"""
        response = self.client.post('/core/job_roles/roles/', {
            'name': 'Auditor',
            'description': 'Read only'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Auditor')
        self.assertEqual(response.data['page_count'], 0)

    def test_role_create_with_pages(self):
        response = self.client.post('/core/job_roles/roles/', {
            'name': 'Agent',
            'pages_with_order': [
                {'page_id': self.home.id, 'parent_page_id': None, 'display_order': 0},
                {'page_id': self.tickets.id, 'parent_page_id': self.home.id, 'display_order': 0},
            ]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        role = Role.objects.get(name='Agent')
        self.assertEqual(
            RolePage.objects.get(role=role, page=self.tickets).parent_page_id,
            self.home.id
        )

    def test_role_create_with_invalid_pages_rolls_back(self):
        response = self.client.post('/core/job_roles/roles/', {
            'name': 'Broken',
            'pages_with_order': [
                {'page_id': self.tickets.id, 'parent_page_id': self.home.id, 'display_order': 0},
            ]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Role.objects.filter(name='Broken').exists())

    def test_role_detail_get(self):
        response = self.client.get(f'/core/job_roles/roles/{self.role.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Support')

    def test_role_update_patch(self):
        response = self.client.patch(
            f'/core/job_roles/roles/{self.role.id}/',
            {'description': 'Updated description'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['description'], 'Updated description')

    def test_role_delete(self):
        response = self.client.delete(f'/core/job_roles/roles/{self.role.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Role.objects.filter(pk=self.role.id).exists())

    def test_role_delete_with_users_is_refused(self):
        UserRole.objects.create(user=self.admin, role=self.role)
        response = self.client.delete(f'/core/job_roles/roles/{self.role.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('assigned to', response.data['error'])


class RolePageOrderAPITests(APITestCase):
    """Test page order, assignment and editor operation endpoints"""

    def setUp(self):
        self.admin = CustomUser.objects.create_user(
            email='admin_o@example.com',
            name='Admin User',
            password='admin123',
            user_type_name='admin'
        )
        self.client.force_authenticate(user=self.admin)

        self.role = Role.objects.create(name='Editors')
        self.p1 = Page.objects.create(name='Articles', url='/articles', icon='book')
        self.p2 = Page.objects.create(name='Media', url='/media')
        self.p3 = Page.objects.create(name='Drafts', url='/articles/drafts')
        self.p4 = Page.objects.create(name='Archive', url='/archive')
        self.url = f'/core/job_roles/roles/{self.role.id}/page-order/'

        RolePage.objects.create(role=self.role, page=self.p1, display_order=0)
        RolePage.objects.create(role=self.role, page=self.p2, display_order=1)
        RolePage.objects.create(role=self.role, page=self.p3, parent_page=self.p1, display_order=0)

    def test_get_page_order(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(rows_of(response), [
            (self.p1.id, None, 0),
            (self.p3.id, self.p1.id, 0),
            (self.p2.id, None, 1),
        ])
        first = response.data['pages_with_order'][0]
        self.assertEqual(first['name'], 'Articles')
        self.assertEqual(first['url'], '/articles')
        self.assertEqual(first['icon'], 'book')

    def test_put_page_order_normalizes(self):
        response = self.client.put(self.url, {
            'pages_with_order': [
                {'page_id': self.p2.id, 'parent_page_id': None, 'display_order': 5},
                {'page_id': self.p4.id, 'parent_page_id': self.p2.id, 'display_order': 9},
                {'page_id': self.p1.id, 'parent_page_id': None, 'display_order': 7},
            ]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(rows_of(response), [
            (self.p2.id, None, 0),
            (self.p4.id, self.p2.id, 0),
            (self.p1.id, None, 1),
        ])
        self.assertEqual(RolePage.objects.filter(role=self.role).count(), 3)
        self.assertFalse(RolePage.objects.filter(role=self.role, page=self.p3).exists())

    def test_put_page_order_rejects_cycle(self):
        response = self.client.put(self.url, {
            'pages_with_order': [
                {'page_id': self.p1.id, 'parent_page_id': self.p2.id, 'display_order': 0},
                {'page_id': self.p2.id, 'parent_page_id': self.p1.id, 'display_order': 0},
            ]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('cycle', response.data['error'])
        # stored order untouched
        self.assertEqual(RolePage.objects.filter(role=self.role).count(), 3)

    def test_put_page_order_rejects_duplicates(self):
        response = self.client.put(self.url, {
            'pages_with_order': [
                {'page_id': self.p1.id, 'display_order': 0},
                {'page_id': self.p1.id, 'display_order': 1},
            ]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_put_page_order_requires_list(self):
        response = self.client.put(self.url, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_assign_page(self):
        response = self.client.post(
            f'/core/job_roles/roles/{self.role.id}/assign-page/',
            {'page_id': self.p4.id},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Page assigned successfully')
        self.assertIn((self.p4.id, None, 2), rows_of(response))

    def test_assign_page_under_parent(self):
        response = self.client.post(
            f'/core/job_roles/roles/{self.role.id}/assign-page/',
            {'page_id': self.p4.id, 'parent_page_id': self.p1.id},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn((self.p4.id, self.p1.id, 1), rows_of(response))

    def test_assign_page_already_assigned(self):
        response = self.client.post(
            f'/core/job_roles/roles/{self.role.id}/assign-page/',
            {'page_id': self.p1.id},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('already assigned', response.data['error'])

    def test_assign_page_missing_id(self):
        response = self.client.post(f'/core/job_roles/roles/{self.role.id}/assign-page/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('page_id is required', response.data['error'])

    def test_remove_page_cascades(self):
        response = self.client.post(
            f'/core/job_roles/roles/{self.role.id}/remove-page/',
            {'page_id': self.p1.id},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Page removed successfully')
        self.assertEqual(rows_of(response), [(self.p2.id, None, 0)])
        self.assertEqual(
            list(RolePage.objects.filter(role=self.role).values_list('page_id', flat=True)),
            [self.p2.id]
        )

    def test_remove_unassigned_page(self):
        response = self.client.post(
            f'/core/job_roles/roles/{self.role.id}/remove-page/',
            {'page_id': self.p4.id},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_operations_preview(self):
        response = self.client.post(f'{self.url}operations/', {
            'operations': [{'op': 'move_down', 'page_id': self.p1.id}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(rows_of(response), [
            (self.p2.id, None, 0),
            (self.p1.id, None, 1),
            (self.p3.id, self.p1.id, 0),
        ])
        self.assertEqual(RolePage.objects.get(role=self.role, page=self.p1).display_order, 0)

    def test_operations_commit(self):
        response = self.client.post(f'{self.url}operations/', {
            'operations': [
                {'op': 'move_down', 'page_id': self.p1.id},
                {'op': 'set_parent', 'page_id': self.p2.id, 'parent_page_id': self.p1.id},
            ],
            'commit': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        moved = RolePage.objects.get(role=self.role, page=self.p2)
        self.assertEqual((moved.parent_page_id, moved.display_order), (self.p1.id, 1))
        self.assertEqual(RolePage.objects.get(role=self.role, page=self.p1).display_order, 0)

    def test_operations_failure_saves_nothing(self):
        response = self.client.post(f'{self.url}operations/', {
            'operations': [
                {'op': 'add_page', 'page_id': self.p4.id},
                {'op': 'set_parent', 'page_id': self.p1.id, 'parent_page_id': self.p3.id},
            ],
            'commit': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(RolePage.objects.filter(role=self.role, page=self.p4).exists())

    def test_operations_unknown_op(self):
        response = self.client.post(f'{self.url}operations/', {
            'operations': [{'op': 'explode', 'page_id': self.p1.id}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_page_hierarchy(self):
        self.p2.deactivate()
        response = self.client.get(f'/core/job_roles/roles/{self.role.id}/page-hierarchy/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        pages = response.data['pages']
        self.assertEqual([node['page_id'] for node in pages], [self.p1.id])
        self.assertEqual(pages[0]['children'][0]['name'], 'Drafts')

    def test_available_pages(self):
        response = self.client.get(f'/core/job_roles/roles/{self.role.id}/available-pages/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [page['id'] for page in response.data]
        self.assertIn(self.p4.id, ids)
        self.assertNotIn(self.p1.id, ids)


class PageAPITests(APITestCase):
    """Test Page API endpoints"""

    def setUp(self):
        self.admin = CustomUser.objects.create_user(
            email='admin_p@example.com',
            name='Admin User',
            password='admin123',
            user_type_name='admin'
        )
        self.client.force_authenticate(user=self.admin)
        self.page = Page.objects.create(name='Invoices', url='/invoices')

    def test_page_create_post(self):
        response = self.client.post('/core/job_roles/pages/', {
            'name': 'Docs',
            'url': 'https://docs.example.com',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_external'])
        self.assertEqual(response.data['status'], 'active')

    def test_page_create_invalid_url(self):
        response = self.client.post('/core/job_roles/pages/', {
            'name': 'Bad',
            'url': 'not a url',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_page_list_filters_by_status(self):
        self.page.deactivate()
        response = self.client.get('/core/job_roles/pages/?status=inactive')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        urls = [page['url'] for page in response.data['data']['results']]
        self.assertEqual(urls, ['/invoices'])

    def test_page_deactivate_patch(self):
        response = self.client.patch(
            f'/core/job_roles/pages/{self.page.id}/',
            {'status': 'inactive'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_active'])

    def test_page_delete(self):
        response = self.client.delete(f'/core/job_roles/pages/{self.page.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_page_delete_assigned_is_refused(self):
        role = Role.objects.create(name='Billing')
        RolePage.objects.create(role=role, page=self.page)
        response = self.client.delete(f'/core/job_roles/pages/{self.page.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Page.objects.filter(pk=self.page.id).exists())


class MyPagesAPITests(APITestCase):
    """Test navigation of the logged in user"""

    def setUp(self):
        self.user = CustomUser.objects.create_user(
            email='member@example.com',
            name='Member',
            password='member123'
        )
        self.client.force_authenticate(user=self.user)

    def test_user_without_roles(self):
        response = self.client.get('/core/job_roles/pages/my-pages-hierarchy/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])

    def test_admin_role_navigation(self):
        setup_admin_role(self.user)
        response = self.client.get('/core/job_roles/pages/my-pages-hierarchy/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [node['url'] for node in response.data],
            ['/dashboard', '/users', '/activity']
        )
        self.assertEqual(
            [child['url'] for child in response.data[1]['children']],
            ['/roles', '/pages']
        )

    def test_page_access(self):
        setup_admin_role(self.user)
        response = self.client.get('/core/job_roles/pages/access/?url=/roles')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['has_access'])

        response = self.client.get('/core/job_roles/pages/access/?url=/billing')
        self.assertFalse(response.data['has_access'])

    def test_page_access_requires_url(self):
        response = self.client.get('/core/job_roles/pages/access/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_management_requires_page_access(self):
        response = self.client.get('/core/job_roles/roles/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        setup_admin_role(self.user)
        response = self.client.get('/core/job_roles/roles/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_unauthenticated(self):
        self.client.force_authenticate(user=None)
        response = self.client.get('/core/job_roles/pages/my-pages-hierarchy/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class UserRolesAPITests(APITestCase):
    """Test user role membership endpoints"""

    def setUp(self):
        self.admin = CustomUser.objects.create_user(
            email='admin_u@example.com',
            name='Admin User',
            password='admin123',
            user_type_name='admin'
        )
        self.client.force_authenticate(user=self.admin)
        self.member = CustomUser.objects.create_user(
            email='member_u@example.com',
            name='Member',
            password='member123'
        )
        self.sales = Role.objects.create(name='Sales')
        self.support = Role.objects.create(name='Support Desk')

    def test_assign_roles(self):
        response = self.client.post(
            f'/core/job_roles/users/{self.member.id}/assign-roles/',
            {'role_ids': [self.sales.id, self.support.id], 'primary_role_id': self.support.id},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [role['role'] for role in response.data['roles']],
            [self.support.id, self.sales.id]
        )

        response = self.client.get(f'/core/job_roles/users/{self.member.id}/roles/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['role_name'], 'Support Desk')
        self.assertTrue(response.data[0]['is_primary'])

    def test_assign_unknown_role(self):
        response = self.client.post(
            f'/core/job_roles/users/{self.member.id}/assign-roles/',
            {'role_ids': [99999]},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_primary_role_must_be_assigned(self):
        response = self.client.post(
            f'/core/job_roles/users/{self.member.id}/assign-roles/',
            {'role_ids': [self.sales.id], 'primary_role_id': self.support.id},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_clear_roles(self):
        UserRole.objects.create(user=self.member, role=self.sales)
        response = self.client.post(
            f'/core/job_roles/users/{self.member.id}/assign-roles/',
            {'role_ids': []},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(UserRole.objects.filter(user=self.member).exists())


class UserRolesAccessTests(APITestCase):
    """Test who can read a user's roles"""

    def setUp(self):
        self.member = CustomUser.objects.create_user(
            email='self_reader@example.com',
            name='Member',
            password='member123'
        )
        self.other = CustomUser.objects.create_user(
            email='other_user@example.com',
            name='Other',
            password='other123'
        )
        self.sales = Role.objects.create(name='Sales Team')
        UserRole.objects.create(user=self.member, role=self.sales, is_primary=True)
        self.client.force_authenticate(user=self.member)

    def test_user_reads_own_roles(self):
        response = self.client.get(f'/core/job_roles/users/{self.member.id}/roles/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([role['role_name'] for role in response.data], ['Sales Team'])

    def test_user_cannot_read_other_users_roles(self):
        response = self.client.get(f'/core/job_roles/users/{self.other.id}/roles/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_users_page_grants_access_to_other_users(self):
        setup_admin_role(self.member, is_primary=False)
        response = self.client.get(f'/core/job_roles/users/{self.other.id}/roles/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])

    def test_unauthenticated(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(f'/core/job_roles/users/{self.member.id}/roles/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
